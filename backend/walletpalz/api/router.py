"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from walletpalz.api.routes import (
    auth, users, transactions, budgets,
    notifications, settings, fx_rates, dashboard
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(transactions.router)
api_router.include_router(budgets.router)
api_router.include_router(notifications.router)
api_router.include_router(settings.router)
api_router.include_router(fx_rates.router)
api_router.include_router(dashboard.router)

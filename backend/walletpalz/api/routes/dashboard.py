"""
Dashboard route aggregating totals, categories and budgets.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.schemas.exchange_rate import DashboardResponse
from walletpalz.schemas.transaction import TransactionSummaryResponse, CategoryTotalItem
from walletpalz.api.dependencies import get_current_user, get_user_preferences
from walletpalz.api.routes.budgets import budgets_with_status
from walletpalz.services import fx_service, transaction_service
from walletpalz.services.settings_service import UserPreferences

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    today: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Everything the dashboard page shows, in the user's base currency."""
    transactions = transaction_service.list_transactions(current_user.id, db)
    rates = fx_service.fetch_rates(preferences.currency)

    summary = transaction_service.summarize_transactions(transactions, rates)
    categories = [
        CategoryTotalItem(
            category=item.category,
            total=round(item.total, 2),
            count=item.count,
            percentage=round(item.percentage, 1),
        )
        for item in transaction_service.category_breakdown(transactions, rates)
    ]

    return DashboardResponse(
        base_currency=preferences.currency,
        summary=TransactionSummaryResponse(
            base_currency=preferences.currency,
            total_income=round(summary.total_income, 2),
            total_expense=round(summary.total_expense, 2),
            balance=round(summary.balance, 2),
            count=summary.count,
            rates_available=bool(rates),
        ),
        categories=categories,
        budgets=budgets_with_status(
            current_user.id, preferences, db, today=today, transactions=transactions, rates=rates
        ),
    )

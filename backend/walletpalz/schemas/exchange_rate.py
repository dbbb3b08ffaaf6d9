"""
Pydantic schemas for exchange rates and the dashboard.
"""
from pydantic import BaseModel
from typing import Dict, List
from decimal import Decimal
from walletpalz.schemas.budget import BudgetWithStatus
from walletpalz.schemas.transaction import TransactionSummaryResponse, CategoryTotalItem


class RateTableResponse(BaseModel):
    """Latest rates relative to a base currency (1 base = rate units of currency)."""
    base_currency: str
    rates: Dict[str, Decimal]
    available: bool  # False when the rate provider could not be reached


class DashboardResponse(BaseModel):
    """Aggregated view of a user's finances in their base currency."""
    base_currency: str
    summary: TransactionSummaryResponse
    categories: List[CategoryTotalItem]
    budgets: List[BudgetWithStatus]

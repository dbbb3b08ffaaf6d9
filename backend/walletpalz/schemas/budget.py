"""
Pydantic schemas for Budget entity.
"""
from pydantic import BaseModel, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from walletpalz.services.budget_service import validate_budget_input


class BudgetBase(BaseModel):
    """Base budget schema."""
    categories: List[str]
    start_date: date
    end_date: date
    limit: Decimal  # In the user's base currency


class BudgetCreate(BudgetBase):
    """Schema for budget creation."""

    @model_validator(mode="after")
    def check_budget(self):
        validate_budget_input(self.categories, self.start_date, self.end_date, self.limit)
        return self


class BudgetResponse(BudgetBase):
    """Schema for budget response."""
    id: int
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class BudgetStatusResponse(BaseModel):
    """Evaluation of a budget against current spending."""
    status: str  # unclassified, expired, over, lastday or good
    message: str
    spent: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    percent_spent: Optional[float] = None
    days_remaining: Optional[int] = None
    daily_budget: Optional[Decimal] = None
    warning: Optional[bool] = None

    class Config:
        from_attributes = True


class BudgetWithStatus(BaseModel):
    """Budget paired with its evaluation."""
    budget: BudgetResponse
    evaluation: BudgetStatusResponse
    base_currency: str

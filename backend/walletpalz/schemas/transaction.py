"""
Pydantic schemas for Transaction entity.
"""
from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date, datetime
from datetime import date as date_type
from decimal import Decimal
from walletpalz.models.transaction import TransactionType, TRANSACTION_CATEGORIES
from walletpalz.services.fx_service import normalize_currency


def _check_category(v):
    if v is not None and v not in TRANSACTION_CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(TRANSACTION_CATEGORIES)}")
    return v


def _check_amount(v):
    # Signed input is accepted; the sign always comes from type
    if v is None:
        return v
    if v == 0:
        raise ValueError("Amount must not be zero")
    return abs(v)


def _check_description(v):
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Description must not be empty")
    return v


class TransactionBase(BaseModel):
    """Base transaction schema."""
    date: date
    description: str
    category: str
    amount: Decimal  # Magnitude; direction is given by type
    currency: str = "USD"
    type: TransactionType = TransactionType.EXPENSE


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return _check_amount(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return _check_description(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return normalize_currency(v)


class TransactionUpdate(BaseModel):
    """Schema for transaction update."""
    date: Optional[date_type] = None
    description: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    type: Optional[TransactionType] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        return _check_amount(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return _check_description(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return normalize_currency(v) if v is not None else v


class TransactionResponse(TransactionBase):
    """Schema for transaction response."""
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionSummaryResponse(BaseModel):
    """Totals for a list of transactions in the user's base currency."""
    base_currency: str
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal  # Income minus expenses
    count: int
    rates_available: bool  # False when amounts could not be converted


class CategoryTotalItem(BaseModel):
    """Expense total for one category."""
    category: str
    total: Decimal
    count: int
    percentage: float  # Share of all expenses (0-100)


class CategoryBreakdownResponse(BaseModel):
    base_currency: str
    categories: List[CategoryTotalItem]

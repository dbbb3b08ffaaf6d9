"""
Transaction model for income and expense records.
"""
from sqlalchemy import Column, String, Numeric, Date, Enum as SQLEnum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from walletpalz.db.base import BaseModel
import enum

TRANSACTION_CATEGORIES = (
    "Food",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Bills",
    "Income",
    "Other",
)


class TransactionType(str, enum.Enum):
    """Transaction direction. The sole source of an amount's sign."""
    EXPENSE = "expense"
    INCOME = "income"


class Transaction(BaseModel):
    """A single income or expense entry owned by one user."""
    __tablename__ = "transactions"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)  # Unsigned magnitude, see type
    currency = Column(String(3), nullable=False, default="USD")
    type = Column(SQLEnum(TransactionType), nullable=False, default=TransactionType.EXPENSE)

    # Relationships
    user = relationship("User", back_populates="transactions")

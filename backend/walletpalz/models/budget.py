"""
Budget model for category spending limits.
"""
from sqlalchemy import Column, Numeric, Date, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from walletpalz.db.base import BaseModel


class Budget(BaseModel):
    """Spending limit over a date range for one or more categories."""
    __tablename__ = "budgets"
    __table_args__ = {"sqlite_autoincrement": True}

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    categories = Column(JSON, nullable=False)  # List of category labels
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    limit = Column(Numeric(15, 2), nullable=False)  # In the user's base currency at creation time

    # Relationships
    user = relationship("User", back_populates="budgets")

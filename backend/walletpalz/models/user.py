"""
User model for authentication and ownership of finance records.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from walletpalz.db.base import BaseModel


class User(BaseModel):
    """Application user. Every transaction, budget and notification belongs to one user."""
    __tablename__ = "users"

    email = Column(String(100), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    budgets = relationship("Budget", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    settings = relationship("UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")

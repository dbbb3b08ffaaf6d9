"""
Transaction management routes.

Adding, editing or deleting a transaction re-runs the budget alert check
with the user's refreshed transaction list.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from datetime import date
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.models.transaction import TransactionType
from walletpalz.schemas.transaction import (
    TransactionCreate, TransactionUpdate, TransactionResponse, TransactionSummaryResponse
)
from walletpalz.api.dependencies import get_current_user, get_user_preferences
from walletpalz.services import fx_service, notification_service, transaction_service
from walletpalz.services.settings_service import UserPreferences

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def run_budget_checks(user_id: int, preferences: UserPreferences, db: Session):
    """Re-evaluate budget alerts against the user's current transactions."""
    if preferences.notifications.get("budgetAlerts") is False:
        return
    try:
        transactions = transaction_service.list_transactions(user_id, db)
    except SQLAlchemyError as e:
        logger.error(f"Could not load transactions for budget check of user {user_id}: {e}")
        return
    rates = fx_service.fetch_rates(preferences.currency)
    notification_service.check_budgets(
        db,
        user_id,
        transactions,
        preferences.currency,
        preferences=preferences.notifications,
        rates=rates,
    )


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    category: Optional[str] = None,
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's transactions, newest first."""
    return transaction_service.list_transactions(
        current_user.id,
        db,
        category=category,
        transaction_type=type,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Add a transaction and raise any alerts it triggers."""
    transaction = transaction_service.create_transaction(
        user_id=current_user.id,
        transaction_date=transaction_data.date,
        description=transaction_data.description,
        category=transaction_data.category,
        amount=transaction_data.amount,
        currency=transaction_data.currency,
        transaction_type=transaction_data.type,
        db=db,
    )

    notification_service.record_transaction(
        db, current_user.id, transaction, preferences.currency, preferences=preferences.notifications
    )
    run_budget_checks(current_user.id, preferences, db)

    db.refresh(transaction)
    return transaction


@router.get("/summary", response_model=TransactionSummaryResponse)
async def get_transaction_summary(
    category: Optional[str] = None,
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Income, expense and balance totals in the user's base currency."""
    transactions = transaction_service.list_transactions(
        current_user.id,
        db,
        category=category,
        transaction_type=type,
        start_date=start_date,
        end_date=end_date,
    )
    rates = fx_service.fetch_rates(preferences.currency)
    summary = transaction_service.summarize_transactions(transactions, rates)

    return TransactionSummaryResponse(
        base_currency=preferences.currency,
        total_income=round(summary.total_income, 2),
        total_expense=round(summary.total_expense, 2),
        balance=round(summary.balance, 2),
        count=summary.count,
        rates_available=bool(rates),
    )


@router.get("/export")
async def export_transactions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download all transactions as CSV."""
    transactions = transaction_service.list_transactions(current_user.id, db)
    if not transactions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No transactions to export"
        )

    content = transaction_service.export_csv(transactions)
    filename = f"transactions_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single transaction."""
    try:
        return transaction_service.get_transaction(transaction_id, current_user.id, db)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Edit a transaction and re-check budget alerts."""
    try:
        transaction = transaction_service.update_transaction(
            transaction_id,
            current_user.id,
            transaction_data.model_dump(exclude_unset=True),
            db,
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    run_budget_checks(current_user.id, preferences, db)

    db.refresh(transaction)
    return transaction


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Delete a transaction."""
    try:
        transaction_service.delete_transaction(transaction_id, current_user.id, db)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    run_budget_checks(current_user.id, preferences, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

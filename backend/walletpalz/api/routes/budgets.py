"""
Budget management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from walletpalz.db.session import get_db
from walletpalz.models.user import User
from walletpalz.schemas.budget import BudgetCreate, BudgetResponse, BudgetStatusResponse, BudgetWithStatus
from walletpalz.api.dependencies import get_current_user, get_user_preferences
from walletpalz.services import budget_service, fx_service, transaction_service
from walletpalz.services.budget_service import BudgetStatus
from walletpalz.services.settings_service import UserPreferences

router = APIRouter(prefix="/budgets", tags=["budgets"])


def status_response(evaluation: BudgetStatus) -> BudgetStatusResponse:
    """Round an evaluation for display."""
    def money(value):
        return round(value, 2) if value is not None else None

    return BudgetStatusResponse(
        status=evaluation.status,
        message=evaluation.message,
        spent=money(evaluation.spent),
        remaining=money(evaluation.remaining),
        percent_spent=round(float(evaluation.percent_spent), 1) if evaluation.percent_spent is not None else None,
        days_remaining=evaluation.days_remaining,
        daily_budget=money(evaluation.daily_budget),
        warning=evaluation.warning,
    )


def budgets_with_status(
    user_id: int,
    preferences: UserPreferences,
    db: Session,
    today: Optional[date] = None,
    transactions: Optional[list] = None,
    rates: Optional[dict] = None,
) -> List[BudgetWithStatus]:
    """Evaluate every budget of a user in their base currency."""
    if transactions is None:
        transactions = transaction_service.list_transactions(user_id, db)
    if rates is None:
        rates = fx_service.fetch_rates(preferences.currency)
    pairs = budget_service.summarize_budgets(
        user_id,
        transactions,
        today or date.today(),
        db,
        rates=rates,
        currency=preferences.currency,
    )
    return [
        BudgetWithStatus(
            budget=BudgetResponse.model_validate(budget),
            evaluation=status_response(evaluation),
            base_currency=preferences.currency,
        )
        for budget, evaluation in pairs
    ]


@router.get("", response_model=List[BudgetResponse])
async def list_budgets(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's budgets, most recent period first."""
    return budget_service.list_budgets(current_user.id, db)


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_data: BudgetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a budget."""
    try:
        return budget_service.create_budget(
            user_id=current_user.id,
            categories=budget_data.categories,
            start_date=budget_data.start_date,
            end_date=budget_data.end_date,
            limit=budget_data.limit,
            db=db,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/status", response_model=List[BudgetWithStatus])
async def get_budget_statuses(
    today: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Evaluate all budgets. ``today`` defaults to the server date."""
    return budgets_with_status(current_user.id, preferences, db, today=today)


@router.get("/{budget_id}", response_model=BudgetWithStatus)
async def get_budget(
    budget_id: int,
    today: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    preferences: UserPreferences = Depends(get_user_preferences),
    db: Session = Depends(get_db)
):
    """Get one budget with its evaluation."""
    try:
        budget = budget_service.get_budget(budget_id, current_user.id, db)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    transactions = transaction_service.list_transactions(current_user.id, db)
    rates = fx_service.fetch_rates(preferences.currency)
    evaluation = budget_service.evaluate_budget(
        budget,
        transactions,
        today or date.today(),
        rates=rates,
        currency=preferences.currency,
    )
    return BudgetWithStatus(
        budget=BudgetResponse.model_validate(budget),
        evaluation=status_response(evaluation),
        base_currency=preferences.currency,
    )


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a budget."""
    try:
        budget_service.delete_budget(budget_id, current_user.id, db)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

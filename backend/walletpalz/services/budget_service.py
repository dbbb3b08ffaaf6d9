"""
Budget service: spend calculation, status classification and budget CRUD.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Sequence
import logging
from walletpalz.models.budget import Budget
from walletpalz.models.notification import Notification
from walletpalz.models.transaction import TransactionType, TRANSACTION_CATEGORIES
from walletpalz.services.fx_service import to_base

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
WARNING_PERCENT = Decimal("80")

STATUS_UNCLASSIFIED = "unclassified"
STATUS_EXPIRED = "expired"
STATUS_OVER = "over"
STATUS_LAST_DAY = "lastday"
STATUS_GOOD = "good"


@dataclass(frozen=True)
class BudgetStatus:
    """Evaluation of one budget at a point in time.

    Only ``status`` and ``message`` are set for expired or unclassifiable
    budgets; ``daily_budget`` and ``warning`` only for ``good``.
    """
    status: str
    message: str
    spent: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    percent_spent: Optional[Decimal] = None
    days_remaining: Optional[int] = None
    daily_budget: Optional[Decimal] = None
    warning: Optional[bool] = None


def validate_budget_input(categories: Sequence[str], start_date: date, end_date: date, limit) -> None:
    """Raise ValueError if a new budget's fields are inconsistent."""
    if not categories:
        raise ValueError("Budget must cover at least one category")
    unknown = [c for c in categories if c not in TRANSACTION_CATEGORIES]
    if unknown:
        raise ValueError(f"Unknown categories: {', '.join(unknown)}")
    if start_date > end_date:
        raise ValueError("End date must be on or after start date")
    if limit is None or Decimal(str(limit)) <= ZERO:
        raise ValueError("Budget limit must be greater than 0")


def is_expense(transaction) -> bool:
    return transaction.type == TransactionType.EXPENSE


def matches_budget(budget, transaction) -> bool:
    """True if the transaction counts toward the budget's spend."""
    return (
        is_expense(transaction)
        and transaction.category in (budget.categories or [])
        and budget.start_date <= transaction.date <= budget.end_date
    )


def calculate_spent(budget, transactions: Iterable, rates: Optional[Mapping[str, Decimal]] = None) -> Decimal:
    """
    Sum the base-currency magnitude of every expense that falls in the budget.

    Used for both status evaluation and notification thresholds. With no
    rates every amount is taken as already in base.
    """
    spent = ZERO
    for transaction in transactions:
        if matches_budget(budget, transaction):
            spent += to_base(abs(Decimal(str(transaction.amount))), transaction.currency, rates)
    return spent


def days_remaining(end_date: date, today: date) -> int:
    return (end_date - today).days


def percent_of(spent: Decimal, limit: Decimal) -> Decimal:
    """Percentage of the limit spent. A zero limit counts as 100% once anything is spent."""
    if limit <= ZERO:
        return HUNDRED if spent > ZERO else ZERO
    return spent / limit * HUNDRED


def evaluate_budget(
    budget,
    transactions: Iterable,
    today: date,
    rates: Optional[Mapping[str, Decimal]] = None,
    currency: str = "USD",
) -> BudgetStatus:
    """Classify a budget as unclassified, expired, over, lastday or good."""
    limit = Decimal(str(budget.limit)) if budget.limit is not None else None
    if not budget.categories or budget.start_date > budget.end_date or limit is None or limit < ZERO:
        logger.warning(f"Cannot classify budget {getattr(budget, 'id', None)}: invalid fields")
        return BudgetStatus(status=STATUS_UNCLASSIFIED, message="Budget data is invalid")

    remaining_days = days_remaining(budget.end_date, today)
    if remaining_days < 0:
        return BudgetStatus(status=STATUS_EXPIRED, message="Budget period has ended")

    spent = calculate_spent(budget, transactions, rates)
    remaining = limit - spent
    percent_spent = percent_of(spent, limit)

    if spent > limit:
        return BudgetStatus(
            status=STATUS_OVER,
            message=f"Exceeded by {currency} {spent - limit:.2f}",
            spent=spent,
            remaining=remaining,
            percent_spent=percent_spent,
            days_remaining=remaining_days,
        )

    if remaining_days == 0:
        return BudgetStatus(
            status=STATUS_LAST_DAY,
            message=f"{currency} {remaining:.2f} left" if remaining > ZERO else "At budget",
            spent=spent,
            remaining=remaining,
            percent_spent=percent_spent,
            days_remaining=remaining_days,
        )

    daily_budget = remaining / remaining_days
    return BudgetStatus(
        status=STATUS_GOOD,
        message=f"{currency} {daily_budget:.2f}/day left",
        spent=spent,
        remaining=remaining,
        percent_spent=percent_spent,
        days_remaining=remaining_days,
        daily_budget=daily_budget,
        warning=percent_spent >= WARNING_PERCENT,
    )


def create_budget(
    user_id: int,
    categories: List[str],
    start_date: date,
    end_date: date,
    limit: Decimal,
    db: Session,
) -> Budget:
    """Validate and persist a new budget."""
    validate_budget_input(categories, start_date, end_date, limit)
    budget = Budget(
        user_id=user_id,
        categories=list(categories),
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    db.add(budget)
    db.commit()
    db.refresh(budget)
    logger.info(f"Created budget {budget.id} for user {user_id}: {', '.join(categories)}")
    return budget


def list_budgets(user_id: int, db: Session) -> List[Budget]:
    """All budgets for a user, most recent period first."""
    return db.query(Budget).filter(
        Budget.user_id == user_id
    ).order_by(Budget.start_date.desc(), Budget.id.desc()).all()


def get_budget(budget_id: int, user_id: int, db: Session) -> Budget:
    budget = db.query(Budget).filter(
        Budget.id == budget_id,
        Budget.user_id == user_id
    ).first()
    if not budget:
        raise LookupError("Budget not found")
    return budget


def delete_budget(budget_id: int, user_id: int, db: Session) -> None:
    budget = get_budget(budget_id, user_id, db)
    # Keep the alerts in the bell but free the (budget, tier) slots
    db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.budget_id == budget_id
    ).update({Notification.budget_id: None}, synchronize_session=False)
    db.delete(budget)
    db.commit()
    logger.info(f"Deleted budget {budget_id} for user {user_id}")


def summarize_budgets(
    user_id: int,
    transactions: Iterable,
    today: date,
    db: Session,
    rates: Optional[Mapping[str, Decimal]] = None,
    currency: str = "USD",
) -> List[tuple]:
    """Pair every budget of a user with its current status."""
    transactions = list(transactions)
    return [
        (budget, evaluate_budget(budget, transactions, today, rates=rates, currency=currency))
        for budget in list_budgets(user_id, db)
    ]

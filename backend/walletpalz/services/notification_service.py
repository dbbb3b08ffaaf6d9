"""
Notification service: budget threshold alerts, transaction alerts and the
read/clear operations behind the notification bell.

Budget alerts are idempotent per (user, budget, tier). The lookup before
insert avoids the common case; the ``uq_notification_budget_tier`` unique
constraint rejects the insert when two checks race.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional
import logging
from walletpalz.models.budget import Budget
from walletpalz.models.notification import Notification, NotificationType
from walletpalz.models.transaction import TransactionType
from walletpalz.services.budget_service import calculate_spent, percent_of

logger = logging.getLogger(__name__)

EXCEEDED_PERCENT = Decimal("100")
WARNING_PERCENT = Decimal("80")
MILESTONE_PERCENTS = (Decimal("75"), Decimal("50"))  # Highest first


@dataclass(frozen=True)
class BudgetTier:
    """Threshold class a budget has reached."""
    type: NotificationType
    tier: str
    milestone: Optional[str] = None


def classify_tier(percent_spent: Decimal) -> Optional[BudgetTier]:
    """Return the single highest tier reached, or None below 50%."""
    if percent_spent >= EXCEEDED_PERCENT:
        return BudgetTier(NotificationType.BUDGET_EXCEEDED, "100")
    if percent_spent >= WARNING_PERCENT:
        return BudgetTier(NotificationType.BUDGET_WARNING, "80")
    for threshold in MILESTONE_PERCENTS:
        if percent_spent >= threshold:
            milestone = str(int(threshold))
            return BudgetTier(NotificationType.BUDGET_MILESTONE, milestone, milestone=milestone)
    return None


def _alerts_enabled(preferences: Optional[Mapping], key: str) -> bool:
    # Missing preference means enabled; only an explicit False switches alerts off
    if not preferences:
        return True
    return preferences.get(key) is not False


def find_budget_notification(db: Session, user_id: int, budget_id: int, tier: BudgetTier) -> Optional[Notification]:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.type == tier.type.value,
        Notification.budget_id == budget_id,
        Notification.tier == tier.tier
    ).first()


def build_budget_notification(
    user_id: int,
    budget: Budget,
    tier: BudgetTier,
    spent: Decimal,
    percent_spent: Decimal,
    base_currency: str,
) -> Notification:
    """Render title, message and metadata for a budget alert."""
    limit = Decimal(str(budget.limit))
    categories_text = ", ".join(budget.categories)
    remaining = limit - spent

    if tier.type == NotificationType.BUDGET_EXCEEDED:
        title = "Budget Exceeded!"
        message = (
            f"Your {categories_text} budget has exceeded {base_currency} {limit:.2f}. "
            f"You've spent {base_currency} {spent:.2f}."
        )
    elif tier.type == NotificationType.BUDGET_WARNING:
        title = "Budget Warning"
        message = (
            f"You've used {percent_spent:.0f}% of your {categories_text} budget. "
            f"{base_currency} {remaining:.2f} remaining."
        )
    else:
        title = f"Budget Milestone: {tier.milestone}%"
        message = (
            f"You've reached {tier.milestone}% of your {categories_text} budget. "
            f"{base_currency} {remaining:.2f} remaining."
        )

    metadata = {
        "budget_id": budget.id,
        "categories": list(budget.categories),
        "budget_limit": float(limit),
        "current_spent": float(round(spent, 2)),
        "percent_spent": f"{percent_spent:.1f}",
    }
    if tier.milestone:
        metadata["milestone"] = tier.milestone

    return Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=tier.type.value,
        budget_id=budget.id,
        tier=tier.tier,
        meta=metadata,
        read=False,
    )


def _insert_unique(db: Session, notification: Notification) -> bool:
    """Insert a budget alert; False if the unique constraint says it already exists."""
    db.add(notification)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            f"Budget notification {notification.type} ({notification.tier}) for budget "
            f"{notification.budget_id} was created concurrently, skipping"
        )
        return False
    return True


def check_budgets(
    db: Session,
    user_id: int,
    transactions: Iterable,
    base_currency: str,
    preferences: Optional[Mapping] = None,
    rates: Optional[Mapping[str, Decimal]] = None,
) -> List[Notification]:
    """
    Re-evaluate every budget of a user and create any newly reached alerts.

    Call after a transaction is added, edited or deleted. Errors are logged
    and never raised to the caller.

    Returns:
        The notifications created during this pass
    """
    created: List[Notification] = []
    if not _alerts_enabled(preferences, "budgetAlerts"):
        logger.debug(f"Budget alerts disabled for user {user_id}")
        return created

    try:
        budgets = db.query(Budget).filter(Budget.user_id == user_id).all()
        if not budgets:
            logger.debug(f"No budgets found for user {user_id}")
            return created

        transactions = list(transactions)
        logger.info(f"Checking {len(budgets)} budget(s) for user {user_id}")

        for budget in budgets:
            spent = calculate_spent(budget, transactions, rates)
            percent_spent = percent_of(spent, Decimal(str(budget.limit)))
            tier = classify_tier(percent_spent)
            if tier is None:
                continue

            if find_budget_notification(db, user_id, budget.id, tier):
                logger.debug(f"{tier.type.value} ({tier.tier}) notification already exists for budget {budget.id}")
                continue

            notification = build_budget_notification(user_id, budget, tier, spent, percent_spent, base_currency)
            if _insert_unique(db, notification):
                logger.info(f"Created {tier.type.value} ({tier.tier}) notification for budget {budget.id}")
                created.append(notification)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error checking budget notifications for user {user_id}: {e}", exc_info=True)
    except Exception as e:
        logger.error(f"Unexpected error checking budget notifications for user {user_id}: {e}", exc_info=True)

    return created


def record_transaction(
    db: Session,
    user_id: int,
    transaction,
    base_currency: str,
    preferences: Optional[Mapping] = None,
) -> Optional[Notification]:
    """Create a transaction alert for a newly added transaction. Never raises."""
    if not _alerts_enabled(preferences, "transactionAlerts"):
        return None

    is_income = transaction.type == TransactionType.INCOME
    amount = abs(Decimal(str(transaction.amount)))
    if is_income:
        title = "Income Recorded"
        message = f"You received {transaction.currency} {amount:.2f} from {transaction.description} ({transaction.category})."
    else:
        title = "Expense Recorded"
        message = f"You spent {transaction.currency} {amount:.2f} on {transaction.description} ({transaction.category})."

    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=NotificationType.TRANSACTION_ALERT.value,
        meta={
            "transaction_id": transaction.id,
            "amount": float(amount),
            "currency": transaction.currency,
            "category": transaction.category,
            "transaction_type": "income" if is_income else "expense",
            "base_currency": base_currency,
        },
        read=False,
    )
    try:
        db.add(notification)
        db.commit()
        db.refresh(notification)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record transaction alert for user {user_id}: {e}", exc_info=True)
        return None
    return notification


def list_notifications(user_id: int, db: Session, limit: Optional[int] = None) -> List[Notification]:
    """Notifications for a user, newest first."""
    query = db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(Notification.created_at.desc(), Notification.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def unread_count(user_id: int, db: Session) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False)
    ).count()


def mark_as_read(notification_id: int, user_id: int, db: Session) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if not notification:
        raise LookupError("Notification not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(user_id: int, db: Session) -> int:
    """Mark every unread notification read. Returns how many changed."""
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False)
    ).update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return updated


def clear_all(user_id: int, db: Session) -> int:
    """Delete all of a user's notifications. Returns how many were removed."""
    deleted = db.query(Notification).filter(
        Notification.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Cleared {deleted} notification(s) for user {user_id}")
    return deleted

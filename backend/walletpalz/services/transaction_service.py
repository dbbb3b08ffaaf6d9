"""
Transaction service for transaction CRUD, aggregation and export.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional
import csv
import io
import logging
from walletpalz.models.transaction import Transaction, TransactionType
from walletpalz.services.fx_service import to_base

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CSV_HEADERS = ["Date", "Description", "Category", "Type", "Amount", "Currency"]
EDITABLE_FIELDS = ("date", "description", "category", "amount", "currency", "type")


@dataclass(frozen=True)
class TransactionSummary:
    """Income, expense and balance totals in base currency."""
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    count: int


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: Decimal
    count: int
    percentage: float


def signed_amount(transaction) -> Decimal:
    """Amount with its sign derived from the transaction type (expenses negative)."""
    magnitude = abs(Decimal(str(transaction.amount)))
    return -magnitude if transaction.type == TransactionType.EXPENSE else magnitude


def create_transaction(
    user_id: int,
    transaction_date: date,
    description: str,
    category: str,
    amount: Decimal,
    currency: str,
    transaction_type: TransactionType,
    db: Session,
) -> Transaction:
    """Persist a new transaction. The amount is stored as a magnitude."""
    transaction = Transaction(
        user_id=user_id,
        date=transaction_date,
        description=description,
        category=category,
        amount=abs(amount),
        currency=currency,
        type=transaction_type,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    logger.info(f"Created {transaction.type.value} transaction {transaction.id} for user {user_id}")
    return transaction


def get_transaction(transaction_id: int, user_id: int, db: Session) -> Transaction:
    transaction = db.query(Transaction).filter(
        Transaction.id == transaction_id,
        Transaction.user_id == user_id
    ).first()
    if not transaction:
        raise LookupError("Transaction not found")
    return transaction


def update_transaction(transaction_id: int, user_id: int, changes: Dict, db: Session) -> Transaction:
    """Apply a partial update. Unknown keys are ignored."""
    transaction = get_transaction(transaction_id, user_id, db)
    for field in EDITABLE_FIELDS:
        if changes.get(field) is None:
            continue
        value = changes[field]
        if field == "amount":
            value = abs(value)
        setattr(transaction, field, value)
    db.commit()
    db.refresh(transaction)
    return transaction


def delete_transaction(transaction_id: int, user_id: int, db: Session) -> None:
    transaction = get_transaction(transaction_id, user_id, db)
    db.delete(transaction)
    db.commit()
    logger.info(f"Deleted transaction {transaction_id} for user {user_id}")


def list_transactions(
    user_id: int,
    db: Session,
    category: Optional[str] = None,
    transaction_type: Optional[TransactionType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Transaction]:
    """A user's transactions, newest first, with optional filters."""
    query = db.query(Transaction).filter(Transaction.user_id == user_id)
    if category:
        query = query.filter(Transaction.category == category)
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    if start_date:
        query = query.filter(Transaction.date >= start_date)
    if end_date:
        query = query.filter(Transaction.date <= end_date)
    return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()


def summarize_transactions(transactions: Iterable, rates: Optional[Mapping[str, Decimal]] = None) -> TransactionSummary:
    """Totals in base currency. Balance is income minus expenses."""
    total_income = ZERO
    total_expense = ZERO
    count = 0
    for transaction in transactions:
        count += 1
        converted = to_base(abs(Decimal(str(transaction.amount))), transaction.currency, rates)
        if transaction.type == TransactionType.INCOME:
            total_income += converted
        else:
            total_expense += converted
    return TransactionSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        count=count,
    )


def category_breakdown(transactions: Iterable, rates: Optional[Mapping[str, Decimal]] = None) -> List[CategoryTotal]:
    """Expense totals per category in base currency, largest first."""
    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        converted = to_base(abs(Decimal(str(transaction.amount))), transaction.currency, rates)
        totals[transaction.category] = totals.get(transaction.category, ZERO) + converted
        counts[transaction.category] = counts.get(transaction.category, 0) + 1

    grand_total = sum(totals.values(), ZERO)
    items = [
        CategoryTotal(
            category=category,
            total=total,
            count=counts[category],
            percentage=float(total / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, total in totals.items()
    ]
    items.sort(key=lambda item: item.total, reverse=True)
    return items


def export_csv(transactions: Iterable) -> str:
    """Render transactions as CSV with unsigned 2-decimal amounts."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for transaction in transactions:
        writer.writerow([
            transaction.date.isoformat(),
            transaction.description,
            transaction.category,
            TransactionType(transaction.type).value,
            f"{abs(Decimal(str(transaction.amount))):.2f}",
            transaction.currency,
        ])
    return buffer.getvalue()

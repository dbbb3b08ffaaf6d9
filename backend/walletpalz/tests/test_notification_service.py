"""
Tests for budget threshold alerts, transaction alerts and bell operations.
"""
from datetime import date
from decimal import Decimal
import pytest
from walletpalz.models import Notification, Transaction, TransactionType
from walletpalz.services import budget_service, notification_service
from walletpalz.services.notification_service import check_budgets, classify_tier, record_transaction


def all_notifications(db, **filters):
    return db.query(Notification).filter_by(**filters).order_by(Notification.id).all()


def transactions(db):
    return db.query(Transaction).all()


@pytest.mark.parametrize("percent, expected", [
    ("49.99", None),
    ("50", ("budget_milestone", "50")),
    ("74.9", ("budget_milestone", "50")),
    ("75", ("budget_milestone", "75")),
    ("79.99", ("budget_milestone", "75")),
    ("80", ("budget_warning", "80")),
    ("99.9", ("budget_warning", "80")),
    ("100", ("budget_exceeded", "100")),
    ("250", ("budget_exceeded", "100")),
])
def test_classify_tier(percent, expected):
    tier = classify_tier(Decimal(percent))
    if expected is None:
        assert tier is None
    else:
        assert (tier.type.value, tier.tier) == expected


def test_milestone_notification_created(db, user, make_budget, make_transaction):
    budget = make_budget()
    make_transaction(60)

    created = check_budgets(db, user.id, transactions(db), "USD")

    assert len(created) == 1
    [notification] = all_notifications(db)
    assert notification.type == "budget_milestone"
    assert notification.title == "Budget Milestone: 50%"
    assert notification.message == "You've reached 50% of your Food budget. USD 40.00 remaining."
    assert notification.meta["milestone"] == "50"
    assert notification.meta["budget_id"] == budget.id
    assert notification.meta["percent_spent"] == "60.0"
    assert notification.read is False


def test_recreated_budget_gets_its_own_alerts(db, user, make_budget, make_transaction):
    old_id = make_budget().id
    make_transaction(60)
    assert len(check_budgets(db, user.id, transactions(db), "USD")) == 1

    budget_service.delete_budget(old_id, user.id, db)
    new = budget_service.create_budget(user.id, ["Food"], date(2024, 1, 1), date(2024, 1, 31), Decimal("100"), db)

    assert new.id != old_id
    [detached] = all_notifications(db)
    assert detached.budget_id is None

    created = check_budgets(db, user.id, transactions(db), "USD")

    assert len(created) == 1
    assert created[0].budget_id == new.id
    assert created[0].tier == "50"
    assert len(all_notifications(db)) == 2


def test_exceeded_only_one_tier(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(60)
    make_transaction(45)

    check_budgets(db, user.id, transactions(db), "USD")

    [notification] = all_notifications(db)
    assert notification.type == "budget_exceeded"
    assert notification.title == "Budget Exceeded!"
    assert notification.message == (
        "Your Food budget has exceeded USD 100.00. You've spent USD 105.00."
    )
    assert "milestone" not in notification.meta


def test_exactly_hundred_percent_is_exceeded(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(100)

    check_budgets(db, user.id, transactions(db), "USD")

    assert [n.type for n in all_notifications(db)] == ["budget_exceeded"]


def test_warning_message(db, user, make_budget, make_transaction):
    make_budget(categories=("Food", "Shopping"))
    make_transaction(50)
    make_transaction(35, category="Shopping")

    check_budgets(db, user.id, transactions(db), "EUR")

    [notification] = all_notifications(db)
    assert notification.type == "budget_warning"
    assert notification.message == "You've used 85% of your Food, Shopping budget. EUR 15.00 remaining."


def test_check_is_idempotent(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(105)

    check_budgets(db, user.id, transactions(db), "USD")
    second = check_budgets(db, user.id, transactions(db), "USD")

    assert second == []
    assert len(all_notifications(db, type="budget_exceeded")) == 1


def test_progression_creates_one_per_tier(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(55)
    check_budgets(db, user.id, transactions(db), "USD")
    make_transaction(30)
    check_budgets(db, user.id, transactions(db), "USD")
    make_transaction(20)
    check_budgets(db, user.id, transactions(db), "USD")

    assert [(n.type, n.tier) for n in all_notifications(db)] == [
        ("budget_milestone", "50"),
        ("budget_warning", "80"),
        ("budget_exceeded", "100"),
    ]


def test_milestone_fifty_not_backfilled_after_seventy_five(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(76)

    check_budgets(db, user.id, transactions(db), "USD")

    assert [n.tier for n in all_notifications(db)] == ["75"]


def test_concurrent_duplicate_rejected_by_constraint(db, user, make_budget, make_transaction, monkeypatch):
    make_budget()
    make_transaction(105)
    check_budgets(db, user.id, transactions(db), "USD")

    # Simulate a second trigger that checked before the first one inserted
    monkeypatch.setattr(notification_service, "find_budget_notification", lambda *args: None)
    created = check_budgets(db, user.id, transactions(db), "USD")

    assert created == []
    assert len(all_notifications(db)) == 1


def test_budget_alerts_disabled(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(105)

    check_budgets(db, user.id, transactions(db), "USD", preferences={"budgetAlerts": False})

    assert all_notifications(db) == []


def test_no_budgets_is_noop(db, user, make_transaction):
    make_transaction(105)

    assert check_budgets(db, user.id, transactions(db), "USD") == []


def test_spend_below_fifty_creates_nothing(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(49)

    check_budgets(db, user.id, transactions(db), "USD")

    assert all_notifications(db) == []


def test_spend_converted_with_rates(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(30, currency="EUR")

    # 30 EUR at 0.5 EUR per USD is 60 USD
    check_budgets(db, user.id, transactions(db), "USD", rates={"EUR": Decimal("0.5")})

    [notification] = all_notifications(db)
    assert notification.tier == "50"
    assert notification.meta["current_spent"] == 60.0


def test_income_does_not_count_toward_budget(db, user, make_budget, make_transaction):
    make_budget()
    make_transaction(500, type=TransactionType.INCOME)

    check_budgets(db, user.id, transactions(db), "USD")

    assert all_notifications(db) == []


def test_store_errors_are_swallowed(db, user, make_budget, make_transaction, monkeypatch):
    make_budget()
    make_transaction(105)

    def broken(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(notification_service, "find_budget_notification", broken)

    assert check_budgets(db, user.id, transactions(db), "USD") == []


def test_record_transaction_alerts_every_add(db, user, make_transaction):
    first = make_transaction(12.5, description="Lunch")
    second = make_transaction(12.5, description="Lunch")

    record_transaction(db, user.id, first, "USD")
    record_transaction(db, user.id, second, "USD")

    alerts = all_notifications(db, type="transaction_alert")
    assert len(alerts) == 2
    assert alerts[0].title == "Expense Recorded"
    assert alerts[0].message == "You spent USD 12.50 on Lunch (Food)."
    assert alerts[0].meta["transaction_id"] == first.id


def test_record_income_transaction(db, user, make_transaction):
    income = make_transaction(2000, category="Income", type=TransactionType.INCOME, description="Salary")

    notification = record_transaction(db, user.id, income, "USD")

    assert notification.title == "Income Recorded"
    assert notification.message == "You received USD 2000.00 from Salary (Income)."


def test_record_transaction_respects_preference(db, user, make_transaction):
    transaction = make_transaction(10)

    assert record_transaction(db, user.id, transaction, "USD", preferences={"transactionAlerts": False}) is None
    assert all_notifications(db) == []


def test_bell_operations(db, user, make_transaction):
    for _ in range(3):
        record_transaction(db, user.id, make_transaction(5), "USD")

    newest_first = notification_service.list_notifications(user.id, db)
    assert [n.id for n in newest_first] == sorted((n.id for n in newest_first), reverse=True)
    assert len(notification_service.list_notifications(user.id, db, limit=2)) == 2
    assert notification_service.unread_count(user.id, db) == 3

    notification_service.mark_as_read(newest_first[0].id, user.id, db)
    assert notification_service.unread_count(user.id, db) == 2

    assert notification_service.mark_all_as_read(user.id, db) == 2
    assert notification_service.unread_count(user.id, db) == 0

    assert notification_service.clear_all(user.id, db) == 3
    assert notification_service.list_notifications(user.id, db) == []


def test_mark_as_read_unknown_notification(db, user):
    with pytest.raises(LookupError):
        notification_service.mark_as_read(999, user.id, db)

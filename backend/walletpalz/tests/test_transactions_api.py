"""
Tests for transaction endpoints and the alerts they trigger.
"""
from datetime import date, timedelta


def add_transaction(client, headers, **overrides):
    payload = {
        "date": date.today().isoformat(),
        "description": "Groceries",
        "category": "Food",
        "amount": "60",
        "currency": "USD",
        "type": "expense",
    }
    payload.update(overrides)
    return client.post("/api/transactions", json=payload, headers=headers)


def add_budget(client, headers, limit="100", categories=("Food",)):
    today = date.today()
    return client.post(
        "/api/budgets",
        json={
            "categories": list(categories),
            "start_date": (today - timedelta(days=5)).isoformat(),
            "end_date": (today + timedelta(days=10)).isoformat(),
            "limit": limit,
        },
        headers=headers,
    )


def notification_types(client, headers):
    return sorted(n["type"] for n in client.get("/api/notifications", headers=headers).json())


def test_create_transaction(client, auth_headers):
    response = add_transaction(client, auth_headers, amount="-42.50", currency="eur")

    assert response.status_code == 201
    body = response.json()
    assert float(body["amount"]) == 42.5
    assert body["currency"] == "EUR"
    assert body["type"] == "expense"


def test_create_transaction_validation(client, auth_headers):
    assert add_transaction(client, auth_headers, category="Groceries").status_code == 422
    assert add_transaction(client, auth_headers, amount="0").status_code == 422
    assert add_transaction(client, auth_headers, description="   ").status_code == 422
    assert add_transaction(client, auth_headers, currency="DOLLAR").status_code == 422


def test_transactions_require_auth(client):
    assert client.get("/api/transactions").status_code == 401


def test_add_creates_transaction_alert(client, auth_headers):
    add_transaction(client, auth_headers)

    assert notification_types(client, auth_headers) == ["transaction_alert"]


def test_add_over_budget_creates_single_exceeded_alert(client, auth_headers):
    add_budget(client, auth_headers)
    add_transaction(client, auth_headers, amount="60")
    add_transaction(client, auth_headers, amount="45")

    types = notification_types(client, auth_headers)
    assert types.count("budget_exceeded") == 1
    assert types.count("budget_milestone") == 1
    assert "budget_warning" not in types
    assert types.count("transaction_alert") == 2


def test_edit_triggers_budget_check(client, auth_headers):
    add_budget(client, auth_headers)
    transaction_id = add_transaction(client, auth_headers, amount="10").json()["id"]

    response = client.put(f"/api/transactions/{transaction_id}", json={"amount": "90"}, headers=auth_headers)

    assert response.status_code == 200
    assert float(response.json()["amount"]) == 90
    assert "budget_warning" in notification_types(client, auth_headers)


def test_alerts_disabled_by_settings(client, auth_headers):
    client.put(
        "/api/settings",
        json={"notifications": {"budgetAlerts": False, "transactionAlerts": False}},
        headers=auth_headers,
    )
    add_budget(client, auth_headers)
    add_transaction(client, auth_headers, amount="150")

    assert notification_types(client, auth_headers) == []


def test_rate_provider_down_still_records(client, auth_headers, rate_provider):
    rate_provider.fail = True
    add_budget(client, auth_headers)

    response = add_transaction(client, auth_headers, amount="50", currency="EUR")

    assert response.status_code == 201
    # Unconverted fallback: 50 EUR counted as 50 USD
    assert "budget_milestone" in notification_types(client, auth_headers)


def test_list_filter_and_delete(client, auth_headers):
    add_transaction(client, auth_headers, category="Bills", amount="80")
    food_id = add_transaction(client, auth_headers, amount="20").json()["id"]

    bills = client.get("/api/transactions", params={"category": "Bills"}, headers=auth_headers).json()
    assert [t["category"] for t in bills] == ["Bills"]

    assert client.delete(f"/api/transactions/{food_id}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/transactions/{food_id}", headers=auth_headers).status_code == 404
    assert len(client.get("/api/transactions", headers=auth_headers).json()) == 1


def test_summary_converts_currencies(client, auth_headers):
    add_transaction(client, auth_headers, category="Income", type="income", amount="1000")
    add_transaction(client, auth_headers, amount="50", currency="EUR")

    body = client.get("/api/transactions/summary", headers=auth_headers).json()

    assert body["base_currency"] == "USD"
    assert float(body["total_income"]) == 1000
    assert float(body["total_expense"]) == 100
    assert float(body["balance"]) == 900
    assert body["rates_available"] is True


def test_export_csv(client, auth_headers):
    assert client.get("/api/transactions/export", headers=auth_headers).status_code == 404

    add_transaction(client, auth_headers, description="Coffee", amount="3.5")
    response = client.get("/api/transactions/export", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.splitlines()
    assert lines[0] == "Date,Description,Category,Type,Amount,Currency"
    assert lines[1].endswith("Coffee,Food,expense,3.50,USD")


def test_cannot_touch_other_users_transaction(client, auth_headers):
    transaction_id = add_transaction(client, auth_headers).json()["id"]

    client.post("/api/auth/signup", json={"email": "other@example.com", "password": "testpassword123"})
    token = client.post(
        "/api/auth/login", json={"email": "other@example.com", "password": "testpassword123"}
    ).json()["access_token"]
    other = {"Authorization": f"Bearer {token}"}

    assert client.get(f"/api/transactions/{transaction_id}", headers=other).status_code == 404
    assert client.delete(f"/api/transactions/{transaction_id}", headers=other).status_code == 404

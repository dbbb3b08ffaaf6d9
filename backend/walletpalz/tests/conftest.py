"""
Shared fixtures: in-memory database, API client and a fake rate provider.
"""
from datetime import date
from decimal import Decimal
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from walletpalz.core.security import get_password_hash
from walletpalz.db.session import get_db, init_db
from walletpalz.main import app
from walletpalz.models import Budget, Transaction, TransactionType, User
from walletpalz.services import fx_service
from walletpalz.services.settings_service import SettingsCache

TEST_RATES = {"USD": 1, "EUR": 0.5, "JPY": 150, "GBP": 0.8}


class FakeRateProvider:
    """Stands in for httpx.get against the rate provider."""

    def __init__(self, rates):
        self.rates = rates
        self.fail = False
        self.status_code = 200
        self.calls = []

    def __call__(self, url, timeout=None):
        self.calls.append(url)
        request = httpx.Request("GET", url)
        if self.fail:
            raise httpx.ConnectError("Connection refused", request=request)
        base = url.rstrip("/").rsplit("/", 1)[-1]
        rates = self.rates
        if isinstance(rates, dict):
            rates = dict(rates, **{base: 1})
        payload = {"result": "success", "base_code": base, "rates": rates}
        return httpx.Response(self.status_code, json=payload, request=request)


@pytest.fixture(autouse=True)
def rate_provider(monkeypatch):
    provider = FakeRateProvider(dict(TEST_RATES))
    monkeypatch.setattr(fx_service.httpx, "get", provider)
    return provider


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    user = User(email="owner@example.com", full_name="Owner", hashed_password=get_password_hash("password123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_budget(db, user):
    def _make(categories=("Food",), start=date(2024, 1, 1), end=date(2024, 1, 31), limit="100"):
        budget = Budget(
            user_id=user.id,
            categories=list(categories),
            start_date=start,
            end_date=end,
            limit=Decimal(limit),
        )
        db.add(budget)
        db.commit()
        db.refresh(budget)
        return budget
    return _make


@pytest.fixture
def make_transaction(db, user):
    def _make(amount, category="Food", on=date(2024, 1, 10), currency="USD",
              type=TransactionType.EXPENSE, description="Groceries"):
        transaction = Transaction(
            user_id=user.id,
            date=on,
            description=description,
            category=category,
            amount=Decimal(str(amount)),
            currency=currency,
            type=type,
        )
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
        return transaction
    return _make


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.settings_cache = SettingsCache()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Sign up and log in a user, returning bearer headers."""
    client.post(
        "/api/auth/signup",
        json={"email": "pal@example.com", "password": "testpassword123", "full_name": "Pal"}
    )
    response = client.post(
        "/api/auth/login",
        json={"email": "pal@example.com", "password": "testpassword123"}
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}

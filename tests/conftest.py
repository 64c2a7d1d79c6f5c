"""
Shared test configuration.

Tests run against an in-memory SQLite database shared through a StaticPool,
so the API under test and the fixtures see the same data.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

import pytest
from uuid import uuid4
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from school_ledger.main import app
from school_ledger.db.dependencies import get_db
from school_ledger.models import Base, ChartOfAccount, Currency
from school_ledger.domain.accounting.enums import AccountType

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test function and drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Session:
    """Provide database session for tests."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}


@pytest.fixture
def currency(db: Session) -> Currency:
    """Base currency."""
    usd = Currency(
        id=uuid4(),
        code="USD",
        name="US Dollar",
        symbol="$",
        is_active=True,
        base_currency=True,
    )
    db.add(usd)
    db.commit()
    return usd


@pytest.fixture
def sample_chart_of_accounts(db: Session):
    """Create a small school chart of accounts."""
    rows = [
        ("cash", "1000", "Cash", AccountType.ASSET, True),
        ("bank", "1010", "Bank", AccountType.ASSET, True),
        ("receivable", "1200", "Accounts Receivable", AccountType.ASSET, False),
        ("equipment", "1500", "Equipment", AccountType.ASSET, False),
        ("payable", "2000", "Accounts Payable", AccountType.LIABILITY, False),
        ("loan", "2500", "Bank Loan", AccountType.LIABILITY, False),
        ("capital", "3000", "Capital", AccountType.EQUITY, False),
        ("tuition", "4000", "Tuition Revenue", AccountType.REVENUE, False),
        ("boarding", "4100", "Boarding Revenue", AccountType.REVENUE, False),
        ("expense", "5000", "Operating Expenses", AccountType.EXPENSE, False),
    ]

    accounts = {}
    for key, code, name, account_type, is_cash in rows:
        account = ChartOfAccount(
            id=uuid4(),
            code=code,
            name=name,
            account_type=account_type,
            is_cash=is_cash,
            is_active=True,
        )
        db.add(account)
        accounts[key] = account

    db.commit()
    return accounts


@pytest.fixture
def post(db: Session, currency: Currency):
    """Post a two-line entry: post(date, debit_account, credit_account, amount, description)."""
    from school_ledger.domain.accounting.gl_service import post_entry

    def _post(entry_date, debit_account, credit_account, amount, description="Test entry", **kwargs):
        return post_entry(
            db,
            entry_date=entry_date,
            reference=kwargs.pop("reference", None),
            description=description,
            lines=[
                {"account_id": debit_account.id, "currency_id": currency.id, "debit": amount, "credit": 0},
                {"account_id": credit_account.id, "currency_id": currency.id, "debit": 0, "credit": amount},
            ],
            **kwargs,
        )

    return _post

"""Pytest configuration and shared fixtures for FinTrack tests.

Provides an isolated SQLite database per test, repository/service fixtures,
record factories and a Flask test client with bearer-token headers.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from fintrack.models import FinanceRecord, User
from fintrack.infra.database import create_session_factory
from fintrack.infra.repositories import SQLModelFinanceRepository
from fintrack.services.finance_service import FinanceService

FIXED_NOW = datetime(2024, 7, 15, 12, 0, 0)


def make_record(
    amount: str | Decimal = "100.00",
    type: str = "income",
    category: str | None = "salary",
    title: str = "Test record",
    created_at: datetime | None = None,
    user_id: int = 1,
) -> FinanceRecord:
    """Build an unsaved record for pure aggregation and predicate tests."""

    return FinanceRecord(
        user_id=user_id,
        title=title,
        amount=Decimal(str(amount)),
        type=type,
        category=category,
        created_at=created_at or FIXED_NOW,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one used by the application."""

    return create_session_factory(db_engine)


@pytest.fixture
def repository(session_factory) -> SQLModelFinanceRepository:
    return SQLModelFinanceRepository(session_factory)


@pytest.fixture
def service(repository) -> FinanceService:
    """Finance service with a frozen clock at ``FIXED_NOW``."""

    return FinanceService(repository, clock=lambda: FIXED_NOW)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(session_factory):
    """Factory for creating users that own records."""

    def _create_user(username: str = "tester") -> User:
        with session_factory() as session:
            user = User(username=username, password_hash="dummy-hash")
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Create a default user for scoping data."""

    return user_factory("tester")


@pytest.fixture
def other_user(user_factory) -> User:
    return user_factory("someone-else")


@pytest.fixture
def record_factory(session_factory, user):
    """Factory for persisting finance records.

    Returns:
        Callable: Function that creates and persists FinanceRecord instances
    """

    def _create_record(
        amount: str | Decimal = "100.00",
        type: str = "income",
        category: str | None = "salary",
        title: str = "Test record",
        created_at: datetime | None = None,
        owner: User | None = None,
    ) -> FinanceRecord:
        owner = owner or user
        record = make_record(
            amount=amount,
            type=type,
            category=category,
            title=title,
            created_at=created_at,
            user_id=owner.id,
        )
        with session_factory() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
        return record

    return _create_record


@pytest.fixture
def seed_year(record_factory):
    """Persist a spread of 2024 records for the default user.

    Returns:
        list[FinanceRecord]: The persisted records
    """

    return [
        record_factory("3000.00", "income", "salary", "Salary payment", datetime(2024, 1, 31, 9)),
        record_factory("120.50", "expense", "food", "Groceries", datetime(2024, 1, 3, 18)),
        record_factory("45.25", "expense", "transportation", "Taxi", datetime(2024, 3, 10)),
        record_factory("3000.00", "income", "salary", "Salary payment", datetime(2024, 6, 30)),
        record_factory("80.00", "expense", "health", "Pharmacy", datetime(2024, 6, 30, 15)),
        record_factory("200.00", "expense", "entertainment", "Concert", datetime(2024, 12, 31, 23)),
        record_factory("999.00", "income", "others", "Bonus", datetime(2025, 1, 1)),
    ]


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FINTRACK_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.setenv("FINTRACK_DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("FINTRACK_SECRET_KEY", "test-secret")

    from fintrack import create_app

    return create_app("testing")


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def app_session_factory(app):
    return app.extensions["fintrack"]["session_factory"]


@pytest.fixture
def auth_headers_for(app, app_session_factory):
    """Create a user in the app database and return bearer headers for it."""

    from fintrack.services import auth

    def _headers(username: str = "alice") -> tuple[int, dict[str, str]]:
        created = auth.create_user(
            username=username, password="s3cret!", session_factory=app_session_factory
        )
        token = auth.issue_token(created.id, "test-secret", expires_in=timedelta(minutes=5))
        return created.id, {"Authorization": f"Bearer {token}"}

    return _headers

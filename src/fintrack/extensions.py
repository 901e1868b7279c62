"""Database and service wiring for the Flask application."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from flask import Flask, current_app
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelFinanceRepository
from .services.finance_service import FinanceService

EXTENSION_KEY = "fintrack"


def init_db(app: Flask) -> None:
    """Initialize the SQLModel engine and session factory from the app config."""

    config: BaseConfig = app.config["FINTRACK_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)

    state = app.extensions.setdefault(EXTENSION_KEY, {})
    state["engine"] = engine
    state["session_factory"] = create_session_factory(engine)


def get_session_factory() -> SessionFactory:
    """Return the session factory bound to the current app."""

    state = current_app.extensions.get(EXTENSION_KEY, {})
    factory = state.get("session_factory")
    if factory is None:  # pragma: no cover - exercised in integration tests
        raise RuntimeError("Database engine not initialized")
    return factory


def get_finance_service() -> FinanceService:
    """Build a finance service for the current request."""

    return FinanceService(SQLModelFinanceRepository(get_session_factory()))


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around operations."""

    with get_session_factory()() as session:
        yield session

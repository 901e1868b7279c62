"""SQLModel implementation of the finance record repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from ...domain.repositories.finance import GroupKey, GroupTotal
from ...models.finance import UNCATEGORIZED, FinanceRecord
from ...services.predicates import RecordPredicate


def predicate_clauses(predicate: RecordPredicate) -> list[Any]:
    """Translate a predicate into SQL clauses; owner scoping comes first."""

    clauses: list[Any] = [col(FinanceRecord.user_id) == predicate.owner_id]

    if predicate.type is not None:
        clauses.append(col(FinanceRecord.type) == predicate.type)
    if predicate.category is not None:
        clauses.append(col(FinanceRecord.category) == predicate.category)
    if predicate.min_amount is not None:
        clauses.append(col(FinanceRecord.amount) >= predicate.min_amount)
    if predicate.max_amount is not None:
        clauses.append(col(FinanceRecord.amount) <= predicate.max_amount)
    if predicate.keyword is not None:
        clauses.append(
            or_(
                col(FinanceRecord.title).icontains(predicate.keyword, autoescape=True),
                col(FinanceRecord.category).icontains(predicate.keyword, autoescape=True),
            )
        )

    date_range = predicate.date_range
    if date_range is not None:
        if date_range.start is not None:
            clauses.append(col(FinanceRecord.created_at) >= date_range.start)
        if date_range.end is not None:
            if date_range.end_inclusive:
                clauses.append(col(FinanceRecord.created_at) <= date_range.end)
            else:
                clauses.append(col(FinanceRecord.created_at) < date_range.end)

    return clauses


class SQLModelFinanceRepository:
    """SQLModel-based finance record repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def find(self, predicate: RecordPredicate) -> list[FinanceRecord]:
        """Return records matching ``predicate``, newest first."""
        with self.session_factory() as session:
            statement = (
                select(FinanceRecord)
                .where(*predicate_clauses(predicate))
                .order_by(col(FinanceRecord.created_at).desc(), col(FinanceRecord.id).desc())
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def aggregate(self, predicate: RecordPredicate, group_key: GroupKey) -> list[GroupTotal]:
        """Sum amounts of matching records grouped by category or type."""
        if group_key == "category":
            key_column = func.coalesce(col(FinanceRecord.category), UNCATEGORIZED)
        elif group_key == "type":
            key_column = col(FinanceRecord.type)
        else:
            raise ValueError(f"Unsupported group key: {group_key}")

        total_column = func.sum(col(FinanceRecord.amount))
        with self.session_factory() as session:
            statement = (
                select(key_column.label("key"), total_column.label("total"))
                .where(*predicate_clauses(predicate))
                .group_by(key_column)
                .order_by(total_column.desc(), key_column)
            )
            rows = session.exec(statement).all()
            return [GroupTotal(key=key, total=_to_decimal(total)) for key, total in rows]

    def get_by_id(self, record_id: int, *, user_id: int) -> Optional[FinanceRecord]:
        """Retrieve a record by ID within the owner's records."""
        with self.session_factory() as session:
            obj = session.exec(
                select(FinanceRecord)
                .where(FinanceRecord.id == record_id)
                .where(FinanceRecord.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def create(self, record: FinanceRecord, *, user_id: int) -> FinanceRecord:
        """Create a new record owned by ``user_id``."""
        with self.session_factory() as session:
            record.user_id = user_id
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def update(self, record: FinanceRecord, *, user_id: int) -> FinanceRecord:
        """Update an existing record."""
        with self.session_factory() as session:
            record.user_id = user_id
            record = session.merge(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def delete(self, record_id: int, *, user_id: int) -> bool:
        """Delete a record by ID; returns whether a row was removed."""
        with self.session_factory() as session:
            record = session.exec(
                select(FinanceRecord)
                .where(FinanceRecord.id == record_id)
                .where(FinanceRecord.user_id == user_id)
            ).first()
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


__all__ = ["SQLModelFinanceRepository", "predicate_clauses"]

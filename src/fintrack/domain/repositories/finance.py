"""Finance record repository protocol."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional, Protocol

from ...models.finance import FinanceRecord
from ...services.predicates import RecordPredicate

GroupKey = Literal["category", "type"]


@dataclass(frozen=True, slots=True)
class GroupTotal:
    """One row of a grouped aggregation."""

    key: str
    total: Decimal


class FinanceRepository(Protocol):
    """Record store operations consumed by the finance service."""

    def find(self, predicate: RecordPredicate) -> list[FinanceRecord]:
        """Return matching records, newest ``created_at`` first."""
        ...

    def aggregate(self, predicate: RecordPredicate, group_key: GroupKey) -> list[GroupTotal]:
        """Sum ``amount`` over matching records grouped by ``group_key``."""
        ...

    def get_by_id(self, record_id: int, *, user_id: int) -> Optional[FinanceRecord]:
        """Retrieve a record owned by ``user_id``."""
        ...

    def create(self, record: FinanceRecord, *, user_id: int) -> FinanceRecord:
        """Persist a new record for ``user_id``."""
        ...

    def update(self, record: FinanceRecord, *, user_id: int) -> FinanceRecord:
        """Persist changes to an existing record."""
        ...

    def delete(self, record_id: int, *, user_id: int) -> bool:
        """Delete a record; return ``False`` when nothing matched."""
        ...

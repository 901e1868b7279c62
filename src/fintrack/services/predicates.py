"""Owner-scoped record predicates built from typed filter criteria."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..models.finance import FinanceRecord
from .criteria import FilterCriteria, parse_filter_criteria
from .date_range import DateRange, resolve_date_range


@dataclass(frozen=True)
class RecordPredicate:
    """Conjunction of record conditions, always restricted to one owner.

    ``keyword`` is a case-insensitive literal substring matched against the title
    or the category. Store adapters translate this object into their native
    query; :meth:`matches` evaluates the same semantics in memory.
    """

    owner_id: int
    type: Optional[str] = None
    category: Optional[str] = None
    keyword: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    date_range: Optional[DateRange] = None

    def matches(self, record: FinanceRecord) -> bool:
        if record.user_id != self.owner_id:
            return False
        if self.type is not None and record.type != self.type:
            return False
        if self.category is not None and record.category != self.category:
            return False
        if self.min_amount is not None and record.amount < self.min_amount:
            return False
        if self.max_amount is not None and record.amount > self.max_amount:
            return False
        if self.keyword is not None:
            needle = self.keyword.lower()
            in_title = needle in (record.title or "").lower()
            in_category = needle in (record.category or "").lower()
            if not (in_title or in_category):
                return False
        if self.date_range is not None and not self.date_range.contains(record.created_at):
            return False
        return True


def build_predicate(
    owner_id: int,
    criteria: FilterCriteria | None = None,
    date_range: DateRange | None = None,
) -> RecordPredicate:
    """Combine criteria and a resolved range into a predicate for ``owner_id``."""

    criteria = criteria or FilterCriteria()
    return RecordPredicate(
        owner_id=owner_id,
        type=criteria.type,
        category=criteria.category,
        keyword=criteria.keyword,
        min_amount=criteria.min_amount,
        max_amount=criteria.max_amount,
        date_range=date_range,
    )


def build_predicate_from_params(
    owner_id: int,
    params: Mapping[str, Any] | None,
    *,
    today: date | None = None,
) -> RecordPredicate:
    """Parse raw parameters, resolve the date range and build the predicate."""

    criteria = parse_filter_criteria(params or {})
    date_range = resolve_date_range(
        year=criteria.year,
        month=criteria.month,
        start_date=criteria.start_date,
        end_date=criteria.end_date,
        today=today,
    )
    return build_predicate(owner_id, criteria, date_range)


__all__ = ["RecordPredicate", "build_predicate", "build_predicate_from_params"]

"""Per-request orchestration of finance record queries, statistics and CRUD."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterator, Mapping

from sqlalchemy.exc import SQLAlchemyError

from ..domain.repositories.finance import FinanceRepository
from ..exceptions import InvalidParameter, MissingParameter, NotFound, StoreUnavailable
from ..logging_config import get_logger
from ..models.finance import Category, FinanceRecord, RecordType, utcnow
from .aggregation import (
    CategoryTotal,
    MonthlyTotals,
    PeriodReport,
    Summary,
    monthly_totals,
    period_report,
    sort_category_totals,
    summarize,
)
from .criteria import clean_param, parse_amount, parse_timestamp, parse_year
from .date_range import DateRange, year_bounds
from .predicates import build_predicate, build_predicate_from_params

logger = get_logger("services.finance")

REQUIRED_FIELDS = ("title", "amount", "type", "category")
EDITABLE_FIELDS = REQUIRED_FIELDS
# Matches the Numeric(12, 2) amount column.
AMOUNT_STEP = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999.99")


class FinanceService:
    """Stateless coordinator between request parameters and the record store.

    Every operation is scoped to ``owner_id``, validates its input before touching
    the store, performs a single store call and folds the result.
    """

    def __init__(
        self,
        repository: FinanceRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_all(self, owner_id: int) -> list[FinanceRecord]:
        """Return every record of the owner, newest first."""

        with self._store_call("list_all", owner_id):
            records = self._repository.find(build_predicate(owner_id))
        logger.info("Listed records", extra={"owner_id": owner_id, "count": len(records)})
        return records

    def filter(self, owner_id: int, params: Mapping[str, Any]) -> list[FinanceRecord]:
        """Return records matching the optional filter parameters."""

        predicate = build_predicate_from_params(owner_id, params, today=self._clock().date())
        with self._store_call("filter", owner_id):
            records = self._repository.find(predicate)
        logger.info("Filtered records", extra={"owner_id": owner_id, "count": len(records)})
        return records

    def summary(self, owner_id: int) -> Summary:
        with self._store_call("summary", owner_id):
            records = self._repository.find(build_predicate(owner_id))
        return summarize(records)

    def category_stats(
        self, owner_id: int, params: Mapping[str, Any] | None = None
    ) -> list[CategoryTotal]:
        """Return per-category totals, largest first; filter parameters are optional."""

        predicate = build_predicate_from_params(owner_id, params, today=self._clock().date())
        with self._store_call("category_stats", owner_id):
            rows = self._repository.aggregate(predicate, "category")
        return sort_category_totals(CategoryTotal(category=row.key, total=row.total) for row in rows)

    def monthly_stats(self, owner_id: int, params: Mapping[str, Any]) -> list[MonthlyTotals]:
        """Return twelve monthly buckets for the required ``year`` parameter."""

        year_raw = clean_param(params.get("year"))
        if year_raw is None:
            raise MissingParameter("year is required", {"fields": ["year"]})
        year = parse_year(year_raw)

        predicate = build_predicate(owner_id, date_range=year_bounds(year))
        with self._store_call("monthly_stats", owner_id):
            records = self._repository.find(predicate)
        return monthly_totals(records)

    def period_report(self, owner_id: int, params: Mapping[str, Any]) -> PeriodReport:
        """Summarize records with ``created_at`` in ``[startDate, endDate]``."""

        start_raw = clean_param(params.get("startDate"))
        end_raw = clean_param(params.get("endDate"))
        missing = [
            name for name, value in (("startDate", start_raw), ("endDate", end_raw)) if value is None
        ]
        if missing:
            raise MissingParameter("startDate and endDate are required", {"fields": missing})

        start = parse_timestamp(start_raw, "startDate")
        end = parse_timestamp(end_raw, "endDate")
        if start > end:
            raise InvalidParameter(
                "startDate must not be after endDate",
                {"startDate": start_raw, "endDate": end_raw},
            )

        predicate = build_predicate(
            owner_id, date_range=DateRange(start=start, end=end, end_inclusive=True)
        )
        with self._store_call("period_report", owner_id):
            records = self._repository.find(predicate)
        return period_report(records, str(start_raw), str(end_raw))

    # ------------------------------------------------------------------
    # Record CRUD
    # ------------------------------------------------------------------
    def get(self, owner_id: int, record_id: int) -> FinanceRecord:
        with self._store_call("get", owner_id):
            record = self._repository.get_by_id(record_id, user_id=owner_id)
        if record is None:
            raise NotFound("Record not found", {"id": record_id})
        return record

    def create(self, owner_id: int, payload: Mapping[str, Any]) -> FinanceRecord:
        """Validate ``payload`` and persist a new record stamped with the current time."""

        missing = [name for name in REQUIRED_FIELDS if clean_param(payload.get(name)) is None]
        if missing:
            raise MissingParameter(
                "title, amount, type and category are required", {"fields": missing}
            )
        fields = _validated_fields(payload, REQUIRED_FIELDS)

        record = FinanceRecord(user_id=owner_id, created_at=self._clock(), **fields)
        with self._store_call("create", owner_id):
            created = self._repository.create(record, user_id=owner_id)
        logger.info("Created record", extra={"owner_id": owner_id, "record_id": created.id})
        return created

    def update(
        self, owner_id: int, record_id: int, payload: Mapping[str, Any]
    ) -> FinanceRecord:
        """Apply editable field changes; owner and ``created_at`` never change."""

        present = [name for name in EDITABLE_FIELDS if name in payload]
        fields = _validated_fields(payload, present)

        with self._store_call("update", owner_id):
            record = self._repository.get_by_id(record_id, user_id=owner_id)
            if record is None:
                raise NotFound("Record not found", {"id": record_id})
            for name, value in fields.items():
                setattr(record, name, value)
            record.updated_at = self._clock()
            updated = self._repository.update(record, user_id=owner_id)
        logger.info("Updated record", extra={"owner_id": owner_id, "record_id": record_id})
        return updated

    def delete(self, owner_id: int, record_id: int) -> None:
        with self._store_call("delete", owner_id):
            removed = self._repository.delete(record_id, user_id=owner_id)
        if not removed:
            raise NotFound("Record not found", {"id": record_id})
        logger.info("Deleted record", extra={"owner_id": owner_id, "record_id": record_id})

    # ------------------------------------------------------------------
    @contextmanager
    def _store_call(self, operation: str, owner_id: int) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception(
                "Record store failure", extra={"operation": operation, "owner_id": owner_id}
            )
            raise StoreUnavailable(
                "Record store is unavailable", {"operation": operation}
            ) from exc


def _validated_fields(payload: Mapping[str, Any], names: tuple[str, ...] | list[str]) -> dict[str, Any]:
    """Validate the named payload fields and return their typed values."""

    fields: dict[str, Any] = {}
    for name in names:
        raw = clean_param(payload.get(name))
        if raw is None:
            raise InvalidParameter(f"{name} must not be empty", {"field": name})
        if name == "title":
            fields["title"] = str(raw)
        elif name == "amount":
            fields["amount"] = _stored_amount(raw)
        elif name == "type":
            try:
                fields["type"] = RecordType(raw).value
            except ValueError as exc:
                raise InvalidParameter(
                    "type must be income or expense", {"field": "type", "value": raw}
                ) from exc
        elif name == "category":
            try:
                fields["category"] = Category(raw).value
            except ValueError as exc:
                raise InvalidParameter(
                    "category is not valid",
                    {"field": "category", "value": raw, "allowed": [c.value for c in Category]},
                ) from exc
    return fields


def _stored_amount(raw: Any) -> Decimal:
    """Parse a record amount and round it to cents, as the column stores it."""

    amount = parse_amount(raw, "amount")
    if amount < 0:
        raise InvalidParameter("amount must not be negative", {"field": "amount", "value": raw})
    if amount > MAX_AMOUNT:
        raise InvalidParameter(
            "amount is too large", {"field": "amount", "value": raw, "max": str(MAX_AMOUNT)}
        )
    return amount.quantize(AMOUNT_STEP, rounding=ROUND_HALF_UP)


__all__ = ["FinanceService"]

"""Coercion of loosely-typed request parameters into typed filter criteria."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from ..exceptions import InvalidParameter

MIN_YEAR = 1
MAX_YEAR = 9998


@dataclass(frozen=True)
class FilterCriteria:
    """Typed filter dimensions for a single request."""

    type: Optional[str] = None
    category: Optional[str] = None
    keyword: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    month: Optional[int] = None
    year: Optional[int] = None


def clean_param(value: Any) -> Any:
    """Return ``None`` for absent or blank values, stripped text otherwise."""

    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_timestamp(raw: Any, field: str) -> datetime:
    """Parse an ISO-8601 date or datetime into a naive UTC datetime.

    Date-only values resolve to midnight UTC and naive datetimes are read as UTC.
    """

    text = str(raw).strip()
    if text[-1:] in {"Z", "z"}:
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidParameter(
            f"{field} is not a valid date", {"field": field, "value": raw}
        ) from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_amount(raw: Any, field: str) -> Decimal:
    """Parse a numeric amount into a finite ``Decimal``."""

    if isinstance(raw, bool):
        raise InvalidParameter(f"{field} must be numeric", {"field": field, "value": raw})
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise InvalidParameter(
            f"{field} must be numeric", {"field": field, "value": raw}
        ) from exc
    if not value.is_finite():
        raise InvalidParameter(f"{field} must be numeric", {"field": field, "value": raw})
    return value


def parse_int(raw: Any, field: str) -> int:
    """Parse an integer parameter such as ``year`` or ``month``."""

    if isinstance(raw, bool):
        raise InvalidParameter(f"{field} must be an integer", {"field": field, "value": raw})
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise InvalidParameter(
            f"{field} must be an integer", {"field": field, "value": raw}
        ) from exc


def parse_year(raw: Any) -> int:
    """Parse ``year`` and keep ``year + 1`` representable as a datetime."""

    year = parse_int(raw, "year")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidParameter(
            f"year must be between {MIN_YEAR} and {MAX_YEAR}", {"field": "year", "value": raw}
        )
    return year


def parse_filter_criteria(params: Mapping[str, Any]) -> FilterCriteria:
    """Validate raw request parameters and return typed criteria.

    ``type`` and ``category`` are passed through untouched; unknown values simply
    match nothing downstream. ``month`` is not range-checked.
    """

    min_raw = clean_param(params.get("minAmount"))
    max_raw = clean_param(params.get("maxAmount"))
    start_raw = clean_param(params.get("startDate"))
    end_raw = clean_param(params.get("endDate"))
    month_raw = clean_param(params.get("month"))
    year_raw = clean_param(params.get("year"))

    return FilterCriteria(
        type=clean_param(params.get("type")),
        category=clean_param(params.get("category")),
        keyword=clean_param(params.get("keyword")),
        min_amount=parse_amount(min_raw, "minAmount") if min_raw is not None else None,
        max_amount=parse_amount(max_raw, "maxAmount") if max_raw is not None else None,
        start_date=parse_timestamp(start_raw, "startDate") if start_raw is not None else None,
        end_date=parse_timestamp(end_raw, "endDate") if end_raw is not None else None,
        month=parse_int(month_raw, "month") if month_raw is not None else None,
        year=parse_year(year_raw) if year_raw is not None else None,
    )


__all__ = [
    "FilterCriteria",
    "clean_param",
    "parse_amount",
    "parse_filter_criteria",
    "parse_int",
    "parse_timestamp",
    "parse_year",
]

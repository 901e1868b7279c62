"""Resolution of year/month/start/end hints into a single timestamp interval."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from ..exceptions import InvalidParameter


@dataclass(frozen=True, slots=True)
class DateRange:
    """A ``created_at`` interval; the lower bound is always inclusive.

    Year and month hints yield an exclusive upper bound, an explicit end date an
    inclusive one. Either bound may be open.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    end_inclusive: bool = False

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None:
            if self.end_inclusive:
                return value <= self.end
            return value < self.end
        return True


def year_bounds(year: int) -> DateRange:
    """Return ``[Jan 1 year, Jan 1 year+1)``."""

    return DateRange(start=datetime(year, 1, 1), end=datetime(year + 1, 1, 1))


def _month_start(year: int, month: int) -> datetime:
    # Months outside 1..12 are folded onto the calendar instead of rejected.
    carry, index = divmod(month - 1, 12)
    try:
        return datetime(year + carry, index + 1, 1)
    except (ValueError, OverflowError) as exc:
        raise InvalidParameter(
            "month cannot be placed on the calendar",
            {"field": "month", "value": month, "year": year},
        ) from exc


def month_bounds(year: int, month: int) -> DateRange:
    """Return ``[first instant of month, first instant of the following month)``."""

    start = _month_start(year, month)
    if month + 1 > 12:
        end = _month_start(year + 1, 1)
    else:
        end = _month_start(year, month + 1)
    return DateRange(start=start, end=end)


def resolve_date_range(
    *,
    year: Optional[int] = None,
    month: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    today: Optional[date] = None,
) -> Optional[DateRange]:
    """Combine temporal hints into one interval, or ``None`` when none are given.

    Hints apply in order: ``year``, then ``month`` (defaulting to the current UTC
    year), then ``start_date``/``end_date`` which override the matching bound.
    An explicit ``end_date`` switches the upper bound to inclusive.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    end_inclusive = False
    touched = False

    if year is not None:
        bounds = year_bounds(year)
        start, end = bounds.start, bounds.end
        touched = True

    if month is not None:
        if year is not None:
            year_value = year
        else:
            year_value = (today or datetime.now(timezone.utc).date()).year
        bounds = month_bounds(year_value, month)
        start, end = bounds.start, bounds.end
        touched = True

    if start_date is not None:
        start = start_date
        touched = True
    if end_date is not None:
        end = end_date
        end_inclusive = True
        touched = True

    if not touched:
        return None
    return DateRange(start=start, end=end, end_inclusive=end_inclusive)


__all__ = ["DateRange", "month_bounds", "resolve_date_range", "year_bounds"]

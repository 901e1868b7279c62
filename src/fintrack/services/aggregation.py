"""Pure folds turning owner-scoped record sequences into summary statistics."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from ..models.finance import UNCATEGORIZED, FinanceRecord, RecordType

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class Summary:
    """Income, expense and balance totals."""

    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    balance: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalIncome": float(self.total_income),
            "totalExpense": float(self.total_expense),
            "balance": float(self.balance),
        }


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    """Summed amount for one category bucket."""

    category: str
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "total": float(self.total)}


@dataclass(frozen=True, slots=True)
class MonthlyTotals:
    """Totals for one calendar month (1-12) of a year."""

    month: int
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    balance: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalIncome": float(self.total_income),
            "totalExpense": float(self.total_expense),
            "balance": float(self.balance),
        }


@dataclass(frozen=True, slots=True)
class PeriodReport:
    """Summary for an explicit period, echoing the requested date strings."""

    start_date: str
    end_date: str
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    balance: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "totalIncome": float(self.total_income),
            "totalExpense": float(self.total_expense),
            "balance": float(self.balance),
        }


def _as_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _split_totals(records: Iterable[FinanceRecord]) -> tuple[Decimal, Decimal]:
    income = ZERO
    expense = ZERO
    for record in records:
        if record.type == RecordType.INCOME.value:
            income += _as_decimal(record.amount)
        elif record.type == RecordType.EXPENSE.value:
            expense += _as_decimal(record.amount)
    return income, expense


def summarize(records: Iterable[FinanceRecord]) -> Summary:
    """Compute total income, total expense and balance."""

    income, expense = _split_totals(records)
    return Summary(total_income=income, total_expense=expense, balance=income - expense)


def sort_category_totals(rows: Iterable[CategoryTotal]) -> list[CategoryTotal]:
    """Order buckets by total descending, then by category name."""

    return sorted(rows, key=lambda row: (-row.total, row.category))


def category_totals(records: Iterable[FinanceRecord]) -> list[CategoryTotal]:
    """Roll up amounts per category; missing categories land in ``uncategorized``."""

    totals: dict[str, Decimal] = {}
    for record in records:
        key = record.category or UNCATEGORIZED
        totals[key] = totals.get(key, ZERO) + _as_decimal(record.amount)
    return sort_category_totals(
        CategoryTotal(category=key, total=total) for key, total in totals.items()
    )


def monthly_totals(records: Iterable[FinanceRecord]) -> list[MonthlyTotals]:
    """Return exactly twelve month buckets for records already limited to one year."""

    income = [ZERO] * 12
    expense = [ZERO] * 12
    for record in records:
        index = record.created_at.month - 1
        if record.type == RecordType.INCOME.value:
            income[index] += _as_decimal(record.amount)
        elif record.type == RecordType.EXPENSE.value:
            expense[index] += _as_decimal(record.amount)

    return [
        MonthlyTotals(
            month=index + 1,
            total_income=income[index],
            total_expense=expense[index],
            balance=income[index] - expense[index],
        )
        for index in range(12)
    ]


def period_report(
    records: Iterable[FinanceRecord], start_date: str, end_date: str
) -> PeriodReport:
    """Summarize records of an explicit period and echo the requested bounds."""

    income, expense = _split_totals(records)
    return PeriodReport(
        start_date=start_date,
        end_date=end_date,
        total_income=income,
        total_expense=expense,
        balance=income - expense,
    )


__all__ = [
    "CategoryTotal",
    "MonthlyTotals",
    "PeriodReport",
    "Summary",
    "category_totals",
    "monthly_totals",
    "period_report",
    "sort_category_totals",
    "summarize",
]

"""Tests for coercing raw request parameters into typed filter criteria."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from fintrack.exceptions import InvalidParameter
from fintrack.services.criteria import (
    FilterCriteria,
    parse_amount,
    parse_filter_criteria,
    parse_timestamp,
)


def test_empty_params_give_empty_criteria():
    assert parse_filter_criteria({}) == FilterCriteria()


def test_blank_values_are_treated_as_absent():
    criteria = parse_filter_criteria({"type": "", "minAmount": "  ", "year": ""})

    assert criteria == FilterCriteria()


def test_full_parameter_set_is_typed():
    criteria = parse_filter_criteria(
        {
            "type": "expense",
            "category": "food",
            "keyword": "lunch",
            "minAmount": "10",
            "maxAmount": "99.95",
            "startDate": "2024-06-01",
            "endDate": "2024-06-30T18:00:00Z",
            "month": "6",
            "year": "2024",
        }
    )

    assert criteria.type == "expense"
    assert criteria.category == "food"
    assert criteria.keyword == "lunch"
    assert criteria.min_amount == Decimal("10")
    assert criteria.max_amount == Decimal("99.95")
    assert criteria.start_date == datetime(2024, 6, 1)
    assert criteria.end_date == datetime(2024, 6, 30, 18)
    assert criteria.month == 6
    assert criteria.year == 2024


def test_unknown_category_and_type_pass_through():
    criteria = parse_filter_criteria({"category": "gadgets", "type": "transfer"})

    assert criteria.category == "gadgets"
    assert criteria.type == "transfer"


@pytest.mark.parametrize("field", ["minAmount", "maxAmount"])
@pytest.mark.parametrize("value", ["abc", "12,50", "NaN", "Infinity"])
def test_non_numeric_amounts_are_rejected(field, value):
    with pytest.raises(InvalidParameter) as excinfo:
        parse_filter_criteria({field: value})

    assert excinfo.value.details["field"] == field


@pytest.mark.parametrize("field", ["startDate", "endDate"])
def test_unparseable_dates_are_rejected(field):
    with pytest.raises(InvalidParameter):
        parse_filter_criteria({field: "31/12/2024"})


def test_non_integer_year_is_rejected():
    with pytest.raises(InvalidParameter):
        parse_filter_criteria({"year": "twenty"})


def test_year_outside_calendar_is_rejected():
    with pytest.raises(InvalidParameter):
        parse_filter_criteria({"year": "9999"})


def test_month_range_is_not_validated():
    assert parse_filter_criteria({"month": "13"}).month == 13


def test_parse_timestamp_converts_offsets_to_naive_utc():
    assert parse_timestamp("2024-06-01T02:00:00+02:00", "startDate") == datetime(2024, 6, 1)


def test_parse_timestamp_date_only_is_midnight():
    assert parse_timestamp("2024-06-30", "endDate") == datetime(2024, 6, 30)


def test_parse_amount_accepts_numbers():
    assert parse_amount(12.5, "amount") == Decimal("12.5")
    assert parse_amount(7, "amount") == Decimal("7")


def test_parse_amount_rejects_booleans():
    with pytest.raises(InvalidParameter):
        parse_amount(True, "amount")

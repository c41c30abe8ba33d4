from datetime import date
from decimal import Decimal

import pytest

from app.masjid.table.columns import custom_filter_column, date_column, enum_column, index_columns, number_column, text_column
from app.masjid.table.filters import (
    DateRange,
    NumberRange,
    filter_records,
    normalize_date_range,
    normalize_filter_value,
    normalize_number_range,
    parse_day,
    parse_number,
    snapshot_filter_value,
)
from app.masjid.table.engine import TableEngine

COLUMNS = index_columns(
    (
        text_column("id", "ID"),
        text_column("payee", "Payee", search=True),
        enum_column("status", "Status", choices=("Paid", "Pending")),
        enum_column("receipt", "Receipt"),
        date_column("date", "Date", range_filter=True),
        number_column("amount", "Amount", range_filter=True),
    )
)

RECORDS = [
    {"id": "EXP-001", "payee": "CEB (Electricity)", "status": "Paid", "receipt": True, "date": "2025-12-05", "amount": 12500},
    {"id": "EXP-002", "payee": "Imam & Staff", "status": "Paid", "receipt": True, "date": "2025-12-01", "amount": 85000},
    {"id": "EXP-003", "payee": "Hardware Store", "status": "Pending", "receipt": False, "date": "2025-12-04", "amount": 4500},
    {"id": "EXP-004", "payee": "Catering Service", "status": "Paid", "receipt": True, "date": "2025-12-02", "amount": 15000},
]


def _ids(rows):
    return [row["id"] for row in rows]


def test_parse_day_accepts_dates_and_timestamps():
    assert parse_day("2025-12-04") == date(2025, 12, 4)
    assert parse_day("2025-12-04T23:59:00Z") == date(2025, 12, 4)
    assert parse_day(date(2025, 1, 2)) == date(2025, 1, 2)
    assert parse_day("not a date") is None
    assert parse_day("") is None
    assert parse_day(True) is None


def test_parse_number_handles_grouping_and_rejects_garbage():
    assert parse_number("12,500") == Decimal("12500")
    assert parse_number(4500) == Decimal("4500")
    assert parse_number(0.5) == Decimal("0.5")
    assert parse_number("abc") is None
    assert parse_number(False) is None


def test_date_range_with_only_start_is_single_day():
    assert normalize_date_range({"from": "2025-12-04"}) == DateRange(date(2025, 12, 4), date(2025, 12, 4))


def test_date_range_end_before_start_collapses_to_start():
    value = normalize_date_range({"from": "2025-12-04", "to": "2025-12-01"})
    assert value == DateRange(date(2025, 12, 4), date(2025, 12, 4))


def test_date_range_with_unparseable_start_is_no_constraint():
    assert normalize_date_range({"from": "yesterday", "to": "2025-12-01"}) is None
    assert normalize_date_range({"to": "2025-12-01"}) is None


def test_date_range_accepts_pairs_and_bare_days():
    assert normalize_date_range(["2025-12-01", "2025-12-03"]) == DateRange(date(2025, 12, 1), date(2025, 12, 3))
    assert normalize_date_range("2025-12-02") == DateRange(date(2025, 12, 2), date(2025, 12, 2))


def test_number_range_max_below_min_collapses_to_min():
    assert normalize_number_range({"min": 5000, "max": 100}) == NumberRange(Decimal("5000"), Decimal("5000"))
    assert normalize_number_range({"max": "2000"}) == NumberRange(None, Decimal("2000"))
    assert normalize_number_range({"min": "x", "max": None}) is None


@pytest.mark.parametrize("raw", ["NaN", "nan", "sNaN", "Infinity", "-inf", float("nan"), float("inf"), Decimal("NaN")])
def test_parse_number_rejects_non_finite_values(raw):
    assert parse_number(raw) is None


def test_non_finite_range_bounds_clear_the_filter():
    amount = COLUMNS["amount"]
    assert normalize_filter_value(amount, {"min": "NaN"}) is None
    assert normalize_filter_value(amount, {"min": "-Infinity", "max": "inf"}) is None
    assert normalize_filter_value(amount, {"min": "nan", "max": "5000"}) == NumberRange(None, Decimal("5000"))


def test_non_finite_filter_leaves_the_view_total():
    engine = TableEngine(RECORDS, COLUMNS.values())
    view = engine.set_filter("amount", {"min": "NaN"})
    assert view.filtered_count == len(RECORDS)
    assert engine.state.filters == {}


def test_non_finite_field_values_do_not_match_or_break_sorting():
    records = [*RECORDS, {"id": "EXP-005", "payee": "Odd", "status": "Paid", "receipt": False, "date": "2025-12-06", "amount": "NaN"}]
    engine = TableEngine(records, COLUMNS.values())
    view = engine.set_filter("amount", {"min": 0})
    assert "EXP-005" not in _ids(view.filtered_sorted_rows)
    engine.clear_filters()
    view = engine.set_sort("amount", "desc")
    assert view.filtered_count == 5


def test_enum_all_sentinel_and_blank_values_clear_the_filter():
    status = COLUMNS["status"]
    assert normalize_filter_value(status, "All") is None
    assert normalize_filter_value(status, "  all ") is None
    assert normalize_filter_value(status, "") is None
    assert normalize_filter_value(status, None) is None
    assert normalize_filter_value(status, "Paid") == "Paid"


def test_malformed_values_clear_instead_of_raising():
    assert normalize_filter_value(COLUMNS["payee"], {"nested": "value"}) is None
    assert normalize_filter_value(COLUMNS["status"], ["Paid", "Pending"]) is None
    assert normalize_filter_value(COLUMNS["amount"], "lots") is None


def test_text_filter_is_case_insensitive_substring():
    rows = filter_records(RECORDS, COLUMNS, {"payee": "STORE"})
    assert _ids(rows) == ["EXP-003"]


def test_text_filter_can_search_a_designated_field():
    columns = index_columns((text_column("id", "ID"), text_column("member", "Member", search=True, field="payee")))
    rows = filter_records(RECORDS, columns, {"member": "catering"})
    assert _ids(rows) == ["EXP-004"]


def test_enum_filter_matches_exactly():
    rows = filter_records(RECORDS, COLUMNS, {"status": "Paid"})
    assert _ids(rows) == ["EXP-001", "EXP-002", "EXP-004"]
    assert filter_records(RECORDS, COLUMNS, {"status": "paid"}) == []


def test_enum_filter_compares_bool_fields_as_text():
    rows = filter_records(RECORDS, COLUMNS, {"receipt": "false"})
    assert _ids(rows) == ["EXP-003"]
    rows = filter_records(RECORDS, COLUMNS, {"receipt": True})
    assert _ids(rows) == ["EXP-001", "EXP-002", "EXP-004"]


def test_date_range_filter_is_inclusive_on_both_ends():
    value = normalize_date_range({"from": "2025-12-02", "to": "2025-12-04"})
    rows = filter_records(RECORDS, COLUMNS, {"date": value})
    assert _ids(rows) == ["EXP-003", "EXP-004"]


def test_number_range_filter_is_inclusive():
    value = normalize_number_range({"min": 4500, "max": 15000})
    rows = filter_records(RECORDS, COLUMNS, {"amount": value})
    assert _ids(rows) == ["EXP-001", "EXP-003", "EXP-004"]


def test_filters_combine_with_and_semantics():
    value = normalize_date_range({"from": "2025-12-01", "to": "2025-12-05"})
    rows = filter_records(RECORDS, COLUMNS, {"status": "Paid", "date": value, "payee": "s"})
    assert _ids(rows) == ["EXP-002", "EXP-004"]


def test_filters_on_unknown_columns_are_ignored():
    assert _ids(filter_records(RECORDS, COLUMNS, {"missing": "x"})) == _ids(RECORDS)


def test_custom_predicate_decides_the_match():
    calls = []

    def _predicate(field_value, filter_value):
        calls.append((field_value, filter_value))
        return field_value >= int(filter_value)

    columns = index_columns((text_column("id", "ID"), custom_filter_column("amount", "Amount", _predicate)))
    rows = filter_records(RECORDS, columns, {"amount": "15000"})
    assert _ids(rows) == ["EXP-002", "EXP-004"]
    assert len(calls) == len(RECORDS)


def test_snapshot_filter_value_serializes_ranges():
    assert snapshot_filter_value(DateRange(date(2025, 12, 1), date(2025, 12, 2))) == {"from": "2025-12-01", "to": "2025-12-02"}
    assert snapshot_filter_value(NumberRange(Decimal("10"), None)) == {"min": "10", "max": None}
    assert snapshot_filter_value("Paid") == "Paid"

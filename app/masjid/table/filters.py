from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Sequence

from app.masjid.table.columns import ColumnDescriptor

ALL_SENTINEL = "all"
TRUE_TEXT = frozenset({"true", "yes", "1"})


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def snapshot(self) -> dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


@dataclass(frozen=True)
class NumberRange:
    minimum: Decimal | None
    maximum: Decimal | None

    def contains(self, number: Decimal) -> bool:
        if self.minimum is not None and number < self.minimum:
            return False
        if self.maximum is not None and number > self.maximum:
            return False
        return True

    def snapshot(self) -> dict[str, str | None]:
        return {
            "min": format(self.minimum, "f") if self.minimum is not None else None,
            "max": format(self.maximum, "f") if self.maximum is not None else None,
        }


def parse_day(value: Any) -> date | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    normalized = text.replace("Z", "+00:00")
    try:
        if "T" in normalized or ":" in normalized:
            return datetime.fromisoformat(normalized).date()
        return date.fromisoformat(normalized)
    except ValueError:
        return None


def parse_number(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str) and value.strip():
        try:
            number = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
    else:
        return None
    # NaN and infinities do not order against real amounts.
    return number if number.is_finite() else None


def parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_TEXT
    return bool(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_all(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == ALL_SENTINEL


def _range_bounds(value: Any, lower: tuple[str, ...], upper: tuple[str, ...]) -> tuple[Any, Any]:
    if isinstance(value, Mapping):
        low = next((value[key] for key in lower if key in value), None)
        high = next((value[key] for key in upper if key in value), None)
        return low, high
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return value[0], value[1]
    return value, None


def normalize_date_range(value: Any) -> DateRange | None:
    if isinstance(value, DateRange):
        return value
    raw_from, raw_to = _range_bounds(value, ("from", "start"), ("to", "end"))
    start = parse_day(raw_from)
    if start is None:
        return None
    end = parse_day(raw_to)
    if end is None or end < start:
        end = start
    return DateRange(start=start, end=end)


def normalize_number_range(value: Any) -> NumberRange | None:
    if isinstance(value, NumberRange):
        return value
    raw_min, raw_max = _range_bounds(value, ("min", "from"), ("max", "to"))
    minimum = parse_number(raw_min)
    maximum = parse_number(raw_max)
    if minimum is None and maximum is None:
        return None
    if minimum is not None and maximum is not None and maximum < minimum:
        maximum = minimum
    return NumberRange(minimum=minimum, maximum=maximum)


def normalize_filter_value(column: ColumnDescriptor, value: Any) -> Any | None:
    """Return the stored form of a filter value, or ``None`` to clear it."""
    if _is_blank(value):
        return None
    kind = column.filter_kind
    if kind == "text":
        if isinstance(value, (Mapping, list, tuple, set)):
            return None
        return value if isinstance(value, str) else str(value)
    if kind == "enum":
        if isinstance(value, (Mapping, list, tuple, set)) or _is_all(value):
            return None
        return value
    if kind == "date_range":
        return normalize_date_range(value)
    if kind == "number_range":
        return normalize_number_range(value)
    if kind == "custom":
        return None if _is_all(value) else value
    return None


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches_builtin(column: ColumnDescriptor, field_value: Any, filter_value: Any) -> bool:
    kind = column.filter_kind
    if kind == "text":
        if field_value is None:
            return False
        return filter_value.casefold() in str(field_value).casefold()
    if kind == "enum":
        if type(field_value) is type(filter_value):
            return field_value == filter_value
        return _scalar_text(field_value) == _scalar_text(filter_value)
    if kind == "date_range":
        day = parse_day(field_value)
        return day is not None and filter_value.contains(day)
    if kind == "number_range":
        number = parse_number(field_value)
        return number is not None and filter_value.contains(number)
    return True


def record_matches(column: ColumnDescriptor, record: Mapping[str, Any], filter_value: Any) -> bool:
    field_value = record.get(column.source_field)
    if column.filter_predicate is not None:
        return bool(column.filter_predicate(field_value, filter_value))
    return _matches_builtin(column, field_value, filter_value)


def filter_records(
    records: Iterable[Mapping[str, Any]],
    columns: Mapping[str, ColumnDescriptor],
    filters: Mapping[str, Any],
) -> list[Mapping[str, Any]]:
    active: Sequence[tuple[ColumnDescriptor, Any]] = [
        (columns[key], value) for key, value in filters.items() if key in columns
    ]
    if not active:
        return list(records)
    return [record for record in records if all(record_matches(column, record, value) for column, value in active)]


def snapshot_filter_value(value: Any) -> Any:
    if isinstance(value, (DateRange, NumberRange)):
        return value.snapshot()
    return value

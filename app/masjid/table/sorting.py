from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Mapping, Sequence

from app.masjid.table.columns import ColumnDescriptor, SortDirection
from app.masjid.table.filters import parse_bool, parse_day, parse_number


@dataclass(frozen=True)
class SortKey:
    column: str
    direction: SortDirection = "asc"

    def snapshot(self) -> dict[str, str]:
        return {"column": self.column, "direction": self.direction}


def normalize_direction(direction: str | None) -> SortDirection:
    return "desc" if str(direction or "asc").strip().lower() == "desc" else "asc"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce(column: ColumnDescriptor, value: Any) -> Any:
    if column.value_type == "number":
        number = parse_number(value)
        return number if number is not None else str(value)
    if column.value_type == "date":
        day = parse_day(value)
        return day if day is not None else str(value)
    if column.value_type == "bool":
        return parse_bool(value)
    if isinstance(value, str):
        return value.strip().casefold()
    return value


def compare_values(column: ColumnDescriptor, left: Any, right: Any) -> int:
    left_value = _coerce(column, left)
    right_value = _coerce(column, right)
    if type(left_value) is not type(right_value):
        left_value, right_value = str(left_value), str(right_value)
    if left_value < right_value:
        return -1
    if left_value > right_value:
        return 1
    return 0


def sort_records(
    records: Sequence[Mapping[str, Any]],
    columns: Mapping[str, ColumnDescriptor],
    sort: Sequence[SortKey],
) -> list[Mapping[str, Any]]:
    """Order records by the sort keys, keeping source order between equal keys.

    Missing values sort last in both directions. Ties are broken on the source
    position, so flipping the direction never reorders equal rows.
    """
    active = [(columns[key.column], key.direction) for key in sort if key.column in columns]
    if not active:
        return list(records)

    def _compare(left: tuple[int, Mapping[str, Any]], right: tuple[int, Mapping[str, Any]]) -> int:
        for column, direction in active:
            left_value = left[1].get(column.key)
            right_value = right[1].get(column.key)
            left_missing = _is_missing(left_value)
            right_missing = _is_missing(right_value)
            if left_missing or right_missing:
                if left_missing and right_missing:
                    continue
                return 1 if left_missing else -1
            comparator = column.sort_comparator or (lambda a, b, c=column: compare_values(c, a, b))
            result = comparator(left_value, right_value)
            if result:
                return -result if direction == "desc" else result
        return left[0] - right[0]

    ordered = sorted(enumerate(records), key=cmp_to_key(_compare))
    return [record for _index, record in ordered]

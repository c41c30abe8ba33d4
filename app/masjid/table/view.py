from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal, Mapping

from app.masjid.table.filters import parse_number
from app.masjid.table.reducer import clamp_page_index, filtered_rows, page_count_for
from app.masjid.table.sorting import sort_records
from app.masjid.table.source import TableSource
from app.masjid.table.state import TableState

SelectionStatus = Literal["none", "some", "all"]

Row = Mapping[str, Any]


@dataclass(frozen=True)
class TableView:
    filtered_sorted_rows: tuple[Row, ...]
    page_rows: tuple[Row, ...]
    selected_rows: tuple[Row, ...]
    page_index: int
    page_size: int
    page_count: int
    filtered_count: int
    total_count: int

    @property
    def selected_count(self) -> int:
        return len(self.selected_rows)

    @property
    def selection_status(self) -> SelectionStatus:
        if not self.selected_rows:
            return "none"
        if len(self.selected_rows) == self.filtered_count:
            return "all"
        return "some"

    @property
    def is_indeterminate(self) -> bool:
        return self.selection_status == "some"


def sum_field(rows: tuple[Row, ...] | list[Row], field: str) -> Decimal:
    total = Decimal("0")
    for row in rows:
        number = parse_number(row.get(field))
        if number is not None:
            total += number
    return total


def materialize(source: TableSource, state: TableState) -> TableView:
    """Derive the view for a state: filter, then sort, then paginate."""
    rows = tuple(sort_records(filtered_rows(source, state.filters), source.columns, state.sort))
    page_size = max(1, state.page_size)
    page_count = page_count_for(len(rows), page_size)
    page_index = clamp_page_index(state.page_index, page_count)
    start = page_index * page_size
    selected = tuple(row for row in rows if source.key_of(row) in state.selection)
    return TableView(
        filtered_sorted_rows=rows,
        page_rows=rows[start:start + page_size],
        selected_rows=selected,
        page_index=page_index,
        page_size=page_size,
        page_count=page_count,
        filtered_count=len(rows),
        total_count=len(source.records),
    )

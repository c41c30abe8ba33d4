from __future__ import annotations

import math
from collections.abc import Hashable
from dataclasses import replace
from typing import Any, Mapping

from app.masjid.table.filters import filter_records, normalize_filter_value
from app.masjid.table.sorting import SortKey, normalize_direction
from app.masjid.table.source import TableSource
from app.masjid.table.state import (
    ClearFilters,
    ClearSort,
    Operation,
    SetFilter,
    SetPage,
    SetPageSize,
    SetSort,
    TableState,
    ToggleSelect,
    ToggleSelectAllFiltered,
    ToggleSort,
)


def page_count_for(filtered_count: int, page_size: int) -> int:
    if filtered_count <= 0:
        return 0
    return math.ceil(filtered_count / max(1, page_size))


def clamp_page_index(index: int, page_count: int) -> int:
    return min(max(0, index), max(0, page_count - 1))


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def filtered_rows(source: TableSource, filters: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    return filter_records(source.records, source.columns, filters)


def filtered_keys(source: TableSource, filters: Mapping[str, Any]) -> frozenset:
    return frozenset(source.key_of(record) for record in filtered_rows(source, filters))


def reconcile(source: TableSource, state: TableState) -> TableState:
    """Re-establish the state invariants against the current source.

    Selection is narrowed to rows that pass the active filters and the page
    index is clamped to the filtered page count.
    """
    visible = filtered_keys(source, state.filters)
    page_count = page_count_for(len(visible), state.page_size)
    return replace(
        state,
        selection=state.selection & visible,
        page_index=clamp_page_index(state.page_index, page_count),
    )


def _set_filter(source: TableSource, state: TableState, operation: SetFilter) -> TableState:
    column = source.columns.get(operation.column)
    if column is None or not column.filterable:
        return state
    filters = dict(state.filters)
    normalized = normalize_filter_value(column, operation.value)
    if normalized is None:
        filters.pop(column.key, None)
    else:
        filters[column.key] = normalized
    return reconcile(source, replace(state, filters=filters, page_index=0))


def _set_sort(source: TableSource, state: TableState, operation: SetSort) -> TableState:
    column = source.columns.get(operation.column)
    if column is None or not column.sortable:
        return state
    return replace(state, sort=(SortKey(column=column.key, direction=normalize_direction(operation.direction)),))


def _toggle_sort(source: TableSource, state: TableState, operation: ToggleSort) -> TableState:
    current = state.sort[0] if state.sort else None
    direction = "desc" if current and current.column == operation.column and current.direction == "asc" else "asc"
    return _set_sort(source, state, SetSort(column=operation.column, direction=direction))


def _set_page(source: TableSource, state: TableState, operation: SetPage) -> TableState:
    index = _as_int(operation.index)
    if index is None:
        return state
    page_count = page_count_for(len(filtered_rows(source, state.filters)), state.page_size)
    return replace(state, page_index=clamp_page_index(index, page_count))


def _set_page_size(source: TableSource, state: TableState, operation: SetPageSize) -> TableState:
    size = _as_int(operation.size)
    if size is None:
        return state
    return reconcile(source, replace(state, page_size=max(1, size)))


def _toggle_select(source: TableSource, state: TableState, operation: ToggleSelect) -> TableState:
    if not isinstance(operation.key, Hashable) or operation.key not in source.keys:
        return state
    if operation.key in state.selection:
        return replace(state, selection=state.selection - {operation.key})
    if operation.key not in filtered_keys(source, state.filters):
        return state
    return replace(state, selection=state.selection | {operation.key})


def _toggle_select_all(source: TableSource, state: TableState) -> TableState:
    visible = filtered_keys(source, state.filters)
    if visible and visible <= state.selection:
        return replace(state, selection=state.selection - visible)
    return replace(state, selection=state.selection | visible)


def reduce_state(source: TableSource, state: TableState, operation: Operation) -> TableState:
    """Apply one operation to a table state and return the next state.

    The input state is never mutated. Operations naming an unknown column, a
    column that does not support the operation, or a value of the wrong shape
    return the state unchanged.
    """
    if isinstance(operation, SetFilter):
        return _set_filter(source, state, operation)
    if isinstance(operation, ClearFilters):
        return reconcile(source, replace(state, filters={}, page_index=0))
    if isinstance(operation, SetSort):
        return _set_sort(source, state, operation)
    if isinstance(operation, ToggleSort):
        return _toggle_sort(source, state, operation)
    if isinstance(operation, ClearSort):
        return replace(state, sort=())
    if isinstance(operation, SetPage):
        return _set_page(source, state, operation)
    if isinstance(operation, SetPageSize):
        return _set_page_size(source, state, operation)
    if isinstance(operation, ToggleSelect):
        return _toggle_select(source, state, operation)
    if isinstance(operation, ToggleSelectAllFiltered):
        return _toggle_select_all(source, state)
    return state

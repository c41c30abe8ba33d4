from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence

from app.masjid.table.columns import ColumnDescriptor
from app.masjid.table.reducer import reconcile, reduce_state
from app.masjid.table.source import TableSource, build_source, with_records
from app.masjid.table.state import (
    DEFAULT_PAGE_SIZE,
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
from app.masjid.table.view import TableView, materialize

ExportSerializer = Callable[[Sequence[Mapping[str, Any]], Mapping[str, str], str], bytes]


@dataclass(frozen=True)
class ExportResult:
    status: Literal["exported", "nothing_to_export"]
    row_count: int
    content: bytes | None = None

    @property
    def exported(self) -> bool:
        return self.status == "exported"


class TableEngine:
    """In-memory listing over one record collection.

    Every mutation goes through :func:`reduce_state`; the view is recomputed
    lazily and cached until the next mutation.
    """

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]],
        columns: Iterable[ColumnDescriptor],
        *,
        key_field: str = "id",
        page_size: int = DEFAULT_PAGE_SIZE,
        title: str = "",
    ) -> None:
        self._source = build_source(records, columns, key_field=key_field)
        self._state = TableState(page_size=max(1, page_size))
        self._view: TableView | None = None
        self.title = title

    @property
    def source(self) -> TableSource:
        return self._source

    @property
    def state(self) -> TableState:
        return self._state

    @property
    def columns(self) -> list[ColumnDescriptor]:
        return list(self._source.columns.values())

    def dispatch(self, operation: Operation) -> TableView:
        next_state = reduce_state(self._source, self._state, operation)
        if next_state != self._state:
            self._state = next_state
            self._view = None
        return self.get_view()

    def set_filter(self, column: str, value: Any) -> TableView:
        return self.dispatch(SetFilter(column=column, value=value))

    def clear_filters(self) -> TableView:
        return self.dispatch(ClearFilters())

    def set_sort(self, column: str, direction: str = "asc") -> TableView:
        return self.dispatch(SetSort(column=column, direction=direction))

    def toggle_sort(self, column: str) -> TableView:
        return self.dispatch(ToggleSort(column=column))

    def clear_sort(self) -> TableView:
        return self.dispatch(ClearSort())

    def set_page(self, index: int) -> TableView:
        return self.dispatch(SetPage(index=index))

    def set_page_size(self, size: int) -> TableView:
        return self.dispatch(SetPageSize(size=size))

    def toggle_select(self, key: Any) -> TableView:
        return self.dispatch(ToggleSelect(key=key))

    def toggle_select_all_filtered(self) -> TableView:
        return self.dispatch(ToggleSelectAllFiltered())

    def replace_records(self, records: Iterable[Mapping[str, Any]]) -> TableView:
        self._source = with_records(self._source, records)
        self._state = reconcile(self._source, self._state)
        self._view = None
        return self.get_view()

    def get_view(self) -> TableView:
        if self._view is None:
            self._view = materialize(self._source, self._state)
        return self._view

    def export_labels(self) -> dict[str, str]:
        return {column.key: column.label for column in self._source.columns.values() if column.exportable}

    def export_filtered(self, serializer: ExportSerializer, *, title: str | None = None) -> ExportResult:
        rows = self.get_view().filtered_sorted_rows
        if not rows:
            return ExportResult(status="nothing_to_export", row_count=0)
        content = serializer(rows, self.export_labels(), title or self.title)
        return ExportResult(status="exported", row_count=len(rows), content=content)

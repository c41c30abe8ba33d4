from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from app.masjid.table.state import (
    ClearFilters,
    ClearSort,
    Operation,
    SetFilter,
    SetPage,
    SetPageSize,
    SetSort,
    ToggleSelect,
    ToggleSelectAllFiltered,
    ToggleSort,
)

SelectionStatus = Literal["none", "some", "all"]


class SortSpec(BaseModel):
    column: str
    direction: Literal["asc", "desc"] = "asc"


class ViewCreateRequest(BaseModel):
    dataset: str
    page_size: int | None = Field(default=None, ge=1)
    filters: dict[str, Any] = Field(default_factory=dict)
    sort: SortSpec | None = None


class SetFilterRequest(BaseModel):
    op: Literal["set_filter"]
    column: str
    value: Any = None

    def to_operation(self) -> Operation:
        return SetFilter(column=self.column, value=self.value)


class ClearFiltersRequest(BaseModel):
    op: Literal["clear_filters"]

    def to_operation(self) -> Operation:
        return ClearFilters()


class SetSortRequest(BaseModel):
    op: Literal["set_sort"]
    column: str
    direction: Literal["asc", "desc"] = "asc"

    def to_operation(self) -> Operation:
        return SetSort(column=self.column, direction=self.direction)


class ToggleSortRequest(BaseModel):
    op: Literal["toggle_sort"]
    column: str

    def to_operation(self) -> Operation:
        return ToggleSort(column=self.column)


class ClearSortRequest(BaseModel):
    op: Literal["clear_sort"]

    def to_operation(self) -> Operation:
        return ClearSort()


class SetPageRequest(BaseModel):
    op: Literal["set_page"]
    index: int

    def to_operation(self) -> Operation:
        return SetPage(index=self.index)


class SetPageSizeRequest(BaseModel):
    op: Literal["set_page_size"]
    size: int

    def to_operation(self) -> Operation:
        return SetPageSize(size=self.size)


class ToggleSelectRequest(BaseModel):
    op: Literal["toggle_select"]
    key: str | int

    def to_operation(self) -> Operation:
        return ToggleSelect(key=self.key)


class ToggleSelectAllFilteredRequest(BaseModel):
    op: Literal["toggle_select_all_filtered"]

    def to_operation(self) -> Operation:
        return ToggleSelectAllFiltered()


ViewOperationRequest = Union[
    SetFilterRequest,
    ClearFiltersRequest,
    SetSortRequest,
    ToggleSortRequest,
    ClearSortRequest,
    SetPageRequest,
    SetPageSizeRequest,
    ToggleSelectRequest,
    ToggleSelectAllFilteredRequest,
]


class ViewResponse(BaseModel):
    view_id: str
    dataset: str
    title: str
    rows: list[dict[str, Any]]
    page_index: int
    page_size: int
    page_count: int
    filtered_count: int
    total_count: int
    selected_keys: list[str | int]
    selected_count: int
    selection_status: SelectionStatus
    filters: dict[str, Any]
    sort: list[SortSpec]
    filtered_total: Decimal | None = None
    selected_total: Decimal | None = None
    trace_id: str


class ColumnItem(BaseModel):
    key: str
    label: str
    value_type: str
    filter_kind: str | None
    filterable: bool
    sortable: bool
    exportable: bool
    choices: list[str]


class DatasetItem(BaseModel):
    name: str
    title: str
    key_field: str
    total_column: str | None
    default_sort: SortSpec | None
    writable: bool
    columns: list[ColumnItem]


class DatasetListResponse(BaseModel):
    datasets: list[DatasetItem]
    trace_id: str


class DatasetResponse(BaseModel):
    dataset: DatasetItem
    trace_id: str

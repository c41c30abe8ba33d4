from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal

from app.masjid.table.exceptions import InvalidCollectionError

FilterKind = Literal["text", "enum", "date_range", "number_range", "custom"]
ValueType = Literal["text", "number", "date", "bool"]
SortDirection = Literal["asc", "desc"]

FilterPredicate = Callable[[Any, Any], bool]
SortComparator = Callable[[Any, Any], int]


@dataclass(frozen=True)
class ColumnDescriptor:
    key: str
    label: str
    value_type: ValueType = "text"
    filter_kind: FilterKind | None = None
    sortable: bool = True
    filter_predicate: FilterPredicate | None = None
    sort_comparator: SortComparator | None = None
    filter_field: str | None = None
    exportable: bool = True
    choices: tuple[str, ...] = ()

    @property
    def filterable(self) -> bool:
        return self.filter_kind is not None

    @property
    def source_field(self) -> str:
        return self.filter_field or self.key

    def describe(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "value_type": self.value_type,
            "filter_kind": self.filter_kind,
            "filterable": self.filterable,
            "sortable": self.sortable,
            "exportable": self.exportable,
            "choices": list(self.choices),
        }


def text_column(key: str, label: str, *, search: bool = False, field: str | None = None, **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(key=key, label=label, filter_kind="text" if search else None, filter_field=field, **kwargs)


def enum_column(key: str, label: str, choices: tuple[str, ...] = (), **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(key=key, label=label, filter_kind="enum", choices=choices, **kwargs)


def date_column(key: str, label: str, *, range_filter: bool = False, **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(
        key=key,
        label=label,
        value_type="date",
        filter_kind="date_range" if range_filter else None,
        **kwargs,
    )


def number_column(key: str, label: str, *, range_filter: bool = False, **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(
        key=key,
        label=label,
        value_type="number",
        filter_kind="number_range" if range_filter else None,
        **kwargs,
    )


def custom_filter_column(
    key: str,
    label: str,
    predicate: FilterPredicate,
    *,
    value_type: ValueType = "text",
    **kwargs,
) -> ColumnDescriptor:
    return ColumnDescriptor(
        key=key,
        label=label,
        value_type=value_type,
        filter_kind="custom",
        filter_predicate=predicate,
        **kwargs,
    )


def index_columns(columns: list[ColumnDescriptor] | tuple[ColumnDescriptor, ...]) -> dict[str, ColumnDescriptor]:
    indexed: dict[str, ColumnDescriptor] = {}
    for column in columns:
        if column.key in indexed:
            raise InvalidCollectionError("duplicate column key", details={"column": column.key})
        indexed[column.key] = column
    return indexed

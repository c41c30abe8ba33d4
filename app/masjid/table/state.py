from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from app.masjid.table.sorting import SortKey

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class TableState:
    filters: dict[str, Any] = field(default_factory=dict)
    sort: tuple[SortKey, ...] = ()
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    selection: frozenset = frozenset()


@dataclass(frozen=True)
class SetFilter:
    column: str
    value: Any = None


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class SetSort:
    column: str
    direction: str = "asc"


@dataclass(frozen=True)
class ToggleSort:
    column: str


@dataclass(frozen=True)
class ClearSort:
    pass


@dataclass(frozen=True)
class SetPage:
    index: int


@dataclass(frozen=True)
class SetPageSize:
    size: int


@dataclass(frozen=True)
class ToggleSelect:
    key: Any


@dataclass(frozen=True)
class ToggleSelectAllFiltered:
    pass


Operation = Union[
    SetFilter,
    ClearFilters,
    SetSort,
    ToggleSort,
    ClearSort,
    SetPage,
    SetPageSize,
    ToggleSelect,
    ToggleSelectAllFiltered,
]

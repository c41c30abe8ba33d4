from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from app.masjid.table.columns import ColumnDescriptor, index_columns
from app.masjid.table.exceptions import InvalidCollectionError


@dataclass(frozen=True)
class TableSource:
    records: tuple[Mapping[str, Any], ...]
    columns: Mapping[str, ColumnDescriptor]
    key_field: str
    keys: frozenset

    def key_of(self, record: Mapping[str, Any]) -> Any:
        return record[self.key_field]


def build_source(
    records: Iterable[Mapping[str, Any]],
    columns: Iterable[ColumnDescriptor],
    *,
    key_field: str = "id",
) -> TableSource:
    materialized = tuple(dict(record) for record in records)
    seen: set = set()
    for position, record in enumerate(materialized):
        key = record.get(key_field)
        if key is None or not isinstance(key, Hashable):
            raise InvalidCollectionError(
                "record is missing its key field",
                details={"key_field": key_field, "position": position},
            )
        if key in seen:
            raise InvalidCollectionError(
                "duplicate record key",
                details={"key_field": key_field, "key": key, "position": position},
            )
        seen.add(key)
    return TableSource(
        records=materialized,
        columns=index_columns(tuple(columns)),
        key_field=key_field,
        keys=frozenset(seen),
    )


def with_records(source: TableSource, records: Iterable[Mapping[str, Any]]) -> TableSource:
    return build_source(records, source.columns.values(), key_field=source.key_field)

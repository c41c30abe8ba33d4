from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from app.masjid.db.store import RecordStore, get_store
from app.masjid.services.datasets import DATASETS
from app.masjid.services.exports import serializer_for
from app.masjid.table.engine import TableEngine

RANGE_SEPARATOR = ".."


def parse_filter(raw: str) -> tuple[str, object]:
    column, sep, value = raw.partition("=")
    if not sep or not column.strip():
        raise ValueError(f"invalid filter '{raw}', expected column=value")
    value = value.strip()
    if RANGE_SEPARATOR in value:
        start, _, end = value.partition(RANGE_SEPARATOR)
        return column.strip(), {"from": start.strip() or None, "to": end.strip() or None}
    return column.strip(), value


def parse_sort(raw: str) -> tuple[str, str]:
    column, _, direction = raw.partition(":")
    direction = (direction or "asc").strip().lower()
    if not column.strip() or direction not in {"asc", "desc"}:
        raise ValueError(f"invalid sort '{raw}', expected column[:asc|desc]")
    return column.strip(), direction


def run_export(
    dataset: str,
    filters: list[str],
    sort: str | None,
    output_format: str,
    output: str,
    *,
    store: RecordStore | None = None,
) -> int:
    definition = DATASETS.get(dataset)
    if definition is None:
        print(f"Unknown dataset '{dataset}'. Choose from: {', '.join(DATASETS)}", file=sys.stderr)
        return 2
    try:
        parsed_filters = [parse_filter(item) for item in filters]
        parsed_sort = parse_sort(sort) if sort else None
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    columns = {column.key: column for column in definition.columns}
    for column, _value in parsed_filters:
        if column not in columns or not columns[column].filterable:
            print(f"Column '{column}' cannot be filtered in {dataset}.", file=sys.stderr)
            return 2

    records = (store or get_store()).snapshot(definition.name)
    engine = TableEngine(
        definition.prepare(records),
        definition.columns,
        key_field=definition.key_field,
        title=definition.title,
    )
    if parsed_sort:
        engine.set_sort(*parsed_sort)
    elif definition.default_sort:
        engine.set_sort(definition.default_sort.column, definition.default_sort.direction)
    for column, value in parsed_filters:
        engine.set_filter(column, value)

    result = engine.export_filtered(serializer_for(output_format, total_column=definition.total_column))
    if not result.exported:
        print("No records to export based on current filters.", file=sys.stderr)
        return 1

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(result.content)
    print(json.dumps({"dataset": dataset, "format": output_format, "rows": result.row_count, "output": str(path)}))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export a filtered masjid listing")
    parser.add_argument("--dataset", required=True, choices=sorted(DATASETS))
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        help="column=value, or column=from..to for ranges; repeatable",
    )
    parser.add_argument("--sort", help="column[:asc|desc]")
    parser.add_argument("--format", choices=["csv", "xlsx", "pdf"], default="csv")
    parser.add_argument("--output", required=True)
    args = parser.parse_args(argv)
    return run_export(args.dataset, args.filter, args.sort, args.format, args.output)


if __name__ == "__main__":
    raise SystemExit(main())

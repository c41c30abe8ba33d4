from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from app.masjid.db.seed import run_seed


class RecordStore:
    """Process-local record collections keyed by dataset name.

    Readers get copies so a collection handed to a table is never mutated
    underneath it.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, list[dict[str, Any]]] = {}

    def load(self, dataset: str, records: list[dict[str, Any]]) -> None:
        with self._lock:
            self._collections[dataset] = [dict(record) for record in records]

    def datasets(self) -> list[str]:
        with self._lock:
            return list(self._collections)

    def snapshot(self, dataset: str) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(record) for record in self._collections.get(dataset, [])]

    def insert(
        self,
        dataset: str,
        build_record: Callable[[list[dict[str, Any]]], dict[str, Any]],
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """Build a record from the current collection and append it atomically.

        ``build_record`` receives a copy of the collection and may raise to
        abort the insert; nothing is appended in that case.
        """
        with self._lock:
            collection = self._collections.setdefault(dataset, [])
            record = dict(build_record([dict(item) for item in collection]))
            collection.append(record)
            return dict(record), [dict(item) for item in collection]

    @contextmanager
    def write_lock(self) -> Iterator[RecordStore]:
        with self._lock:
            yield self

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()


store = RecordStore()


def get_store() -> RecordStore:
    if not store.datasets():
        run_seed(store)
    return store

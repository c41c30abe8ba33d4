from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from app.masjid.core.config import settings
from app.masjid.core.error_catalog import AppError, ErrorCatalog
from app.masjid.core.logging import log_json
from app.masjid.core.metrics import metrics
from app.masjid.services.datasets import DatasetDefinition
from app.masjid.table.engine import ExportResult, ExportSerializer, TableEngine
from app.masjid.table.state import Operation, SetFilter, SetPageSize, SetSort
from app.masjid.table.view import TableView

logger = logging.getLogger("masjid.views")


@dataclass
class ViewSession:
    view_id: str
    dataset: DatasetDefinition
    engine: TableEngine
    expires_at: float
    lock: threading.Lock = field(default_factory=threading.Lock)


def operation_name(operation: Operation) -> str:
    name = type(operation).__name__
    return "".join(f"_{char.lower()}" if char.isupper() else char for char in name).lstrip("_")


class ViewSessionStore:
    """Open listing views, each owned by one engine and guarded by its own lock."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_sessions: int | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_sessions = max_sessions
        self._now = now or time.monotonic
        self._lock = threading.Lock()
        self._sessions: dict[str, ViewSession] = {}

    @property
    def ttl_seconds(self) -> float:
        return max(1.0, float(self._ttl_seconds if self._ttl_seconds is not None else settings.VIEW_SESSION_TTL_SECONDS))

    @property
    def max_sessions(self) -> int:
        return max(1, int(self._max_sessions if self._max_sessions is not None else settings.VIEW_SESSIONS_MAX))

    def _expire(self) -> None:
        now = self._now()
        stale = [view_id for view_id, session in self._sessions.items() if session.expires_at <= now]
        for view_id in stale:
            self._sessions.pop(view_id, None)

    def open(
        self,
        definition: DatasetDefinition,
        records: Iterable[Mapping[str, Any]],
        *,
        page_size: int | None = None,
        filters: Mapping[str, Any] | None = None,
        sort: tuple[str, str] | None = None,
    ) -> tuple[ViewSession, TableView]:
        engine = TableEngine(
            definition.prepare(records),
            definition.columns,
            key_field=definition.key_field,
            page_size=_cap_page_size(page_size or settings.DEFAULT_PAGE_SIZE),
            title=definition.title,
        )
        if sort is not None:
            engine.dispatch(SetSort(column=sort[0], direction=sort[1]))
        elif definition.default_sort is not None:
            engine.dispatch(SetSort(column=definition.default_sort.column, direction=definition.default_sort.direction))
        for column, value in (filters or {}).items():
            engine.dispatch(SetFilter(column=column, value=value))

        session = ViewSession(
            view_id=uuid.uuid4().hex,
            dataset=definition,
            engine=engine,
            expires_at=self._now() + self.ttl_seconds,
        )
        with self._lock:
            self._expire()
            while len(self._sessions) >= self.max_sessions:
                oldest = min(self._sessions.values(), key=lambda item: item.expires_at)
                self._sessions.pop(oldest.view_id, None)
            self._sessions[session.view_id] = session
        log_json(
            logger,
            {"event": "view_opened", "view_id": session.view_id, "dataset": definition.name},
        )
        return session, engine.get_view()

    def get(self, view_id: str) -> ViewSession:
        with self._lock:
            self._expire()
            session = self._sessions.get(view_id)
            if session is None:
                raise AppError(ErrorCatalog.VIEW_NOT_FOUND, details={"view_id": view_id})
            session.expires_at = self._now() + self.ttl_seconds
            return session

    def current_view(self, view_id: str) -> tuple[ViewSession, TableView]:
        session = self.get(view_id)
        with session.lock:
            return session, session.engine.get_view()

    def apply(self, view_id: str, operation: Operation) -> tuple[ViewSession, TableView]:
        session = self.get(view_id)
        if isinstance(operation, SetPageSize):
            operation = SetPageSize(size=_cap_page_size(operation.size))
        with session.lock:
            view = session.engine.dispatch(operation)
        op = operation_name(operation)
        metrics.record_view_operation(dataset=session.dataset.name, op=op)
        log_json(
            logger,
            {
                "event": "view_operation",
                "view_id": view_id,
                "dataset": session.dataset.name,
                "op": op,
                "filtered_count": view.filtered_count,
                "page_index": view.page_index,
                "selected_count": view.selected_count,
            },
        )
        return session, view

    def export(
        self,
        view_id: str,
        serializer: ExportSerializer,
        *,
        title: str | None = None,
        max_rows: int | None = None,
    ) -> tuple[ViewSession, ExportResult]:
        session = self.get(view_id)
        with session.lock:
            filtered_count = session.engine.get_view().filtered_count
            if max_rows is not None and max_rows > 0 and filtered_count > max_rows:
                raise AppError(
                    ErrorCatalog.VALIDATION_ERROR,
                    details={
                        "message": "export exceeds row limit",
                        "reason_code": "EXPORT_ROWS_LIMIT_EXCEEDED",
                        "max_rows": max_rows,
                        "row_count": filtered_count,
                    },
                )
            result = session.engine.export_filtered(serializer, title=title)
        return session, result

    def close(self, view_id: str) -> None:
        with self._lock:
            if self._sessions.pop(view_id, None) is None:
                raise AppError(ErrorCatalog.VIEW_NOT_FOUND, details={"view_id": view_id})

    def refresh_dataset(self, definition: DatasetDefinition, records: Iterable[Mapping[str, Any]]) -> int:
        prepared = definition.prepare(records)
        with self._lock:
            self._expire()
            sessions = [session for session in self._sessions.values() if session.dataset.name == definition.name]
        for session in sessions:
            with session.lock:
                session.engine.replace_records(prepared)
        if sessions:
            log_json(
                logger,
                {"event": "views_refreshed", "dataset": definition.name, "views": len(sessions)},
            )
        return len(sessions)

    def summary(self) -> dict[str, int]:
        with self._lock:
            self._expire()
            counts: dict[str, int] = {}
            for session in self._sessions.values():
                counts[session.dataset.name] = counts.get(session.dataset.name, 0) + 1
            return counts

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


def _cap_page_size(size: Any) -> Any:
    if isinstance(size, int) and not isinstance(size, bool):
        return min(size, settings.MAX_PAGE_SIZE)
    return size


view_sessions = ViewSessionStore()


def get_view_sessions() -> ViewSessionStore:
    return view_sessions

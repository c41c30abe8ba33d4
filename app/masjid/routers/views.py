from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from app.masjid.core.config import settings
from app.masjid.core.error_catalog import AppError, ErrorCatalog
from app.masjid.core.logging import log_json
from app.masjid.core.metrics import metrics
from app.masjid.db.store import RecordStore, get_store
from app.masjid.schemas.views import SortSpec, ViewCreateRequest, ViewOperationRequest, ViewResponse
from app.masjid.services.datasets import get_dataset
from app.masjid.services.exports import (
    CONTENT_TYPES,
    ExportFormat,
    checksum_bytes,
    default_filename,
    sanitize_filename,
    serializer_for,
)
from app.masjid.services.views import ViewSession, ViewSessionStore, get_view_sessions
from app.masjid.table.filters import DateRange, snapshot_filter_value
from app.masjid.table.view import TableView, sum_field

router = APIRouter()
logger = logging.getLogger("masjid.exports")


def _view_response(request: Request, session: ViewSession, view: TableView) -> ViewResponse:
    engine = session.engine
    total_column = session.dataset.total_column
    return ViewResponse(
        view_id=session.view_id,
        dataset=session.dataset.name,
        title=session.dataset.title,
        rows=[dict(row) for row in view.page_rows],
        page_index=view.page_index,
        page_size=view.page_size,
        page_count=view.page_count,
        filtered_count=view.filtered_count,
        total_count=view.total_count,
        selected_keys=[engine.source.key_of(row) for row in view.selected_rows],
        selected_count=view.selected_count,
        selection_status=view.selection_status,
        filters={key: snapshot_filter_value(value) for key, value in engine.state.filters.items()},
        sort=[SortSpec(column=key.column, direction=key.direction) for key in engine.state.sort],
        filtered_total=sum_field(view.filtered_sorted_rows, total_column) if total_column else None,
        selected_total=sum_field(view.selected_rows, total_column) if total_column else None,
        trace_id=getattr(request.state, "trace_id", ""),
    )


def _tag_request(request: Request, session: ViewSession, op: str | None = None) -> None:
    request.state.dataset = session.dataset.name
    if op is not None:
        request.state.view_op = op


def _export_title(session: ViewSession) -> str:
    title = session.dataset.title
    for value in session.engine.state.filters.values():
        if isinstance(value, DateRange):
            start = value.start.strftime("%b %d, %Y")
            end = value.end.strftime("%b %d, %Y")
            return f"{title} ({start})" if value.start == value.end else f"{title} ({start} - {end})"
    return title


@router.post("/masjid/views", response_model=ViewResponse, status_code=201)
def open_view(
    request: Request,
    payload: ViewCreateRequest,
    store: RecordStore = Depends(get_store),
    sessions: ViewSessionStore = Depends(get_view_sessions),
):
    definition = get_dataset(payload.dataset)
    session, view = sessions.open(
        definition,
        store.snapshot(definition.name),
        page_size=payload.page_size,
        filters=payload.filters,
        sort=(payload.sort.column, payload.sort.direction) if payload.sort else None,
    )
    _tag_request(request, session)
    return _view_response(request, session, view)


@router.get("/masjid/views/{view_id}", response_model=ViewResponse)
def get_view(
    request: Request,
    view_id: str,
    sessions: ViewSessionStore = Depends(get_view_sessions),
):
    session, view = sessions.current_view(view_id)
    _tag_request(request, session)
    return _view_response(request, session, view)


@router.post("/masjid/views/{view_id}/operations", response_model=ViewResponse)
def apply_operation(
    request: Request,
    view_id: str,
    payload: Annotated[ViewOperationRequest, Body(discriminator="op")],
    sessions: ViewSessionStore = Depends(get_view_sessions),
):
    session, view = sessions.apply(view_id, payload.to_operation())
    _tag_request(request, session, payload.op)
    return _view_response(request, session, view)


@router.delete("/masjid/views/{view_id}", status_code=204)
def close_view(view_id: str, sessions: ViewSessionStore = Depends(get_view_sessions)):
    sessions.close(view_id)
    return Response(status_code=204)


@router.get("/masjid/views/{view_id}/export")
def export_view(
    request: Request,
    view_id: str,
    format: ExportFormat = Query("csv"),
    file_name: str | None = Query(None),
    sessions: ViewSessionStore = Depends(get_view_sessions),
):
    session = sessions.get(view_id)
    _tag_request(request, session, "export")
    generated_at = datetime.now().astimezone()
    title = _export_title(session)
    serializer = serializer_for(format, total_column=session.dataset.total_column, generated_at=generated_at)
    session, result = sessions.export(view_id, serializer, title=title, max_rows=settings.EXPORTS_MAX_ROWS)
    dataset = session.dataset.name

    if not result.exported:
        metrics.record_export(dataset=dataset, format=format, outcome="empty")
        log_json(
            logger,
            {"event": "view_export_empty", "view_id": view_id, "dataset": dataset, "format": format},
            level=logging.WARNING,
        )
        raise AppError(
            ErrorCatalog.NOTHING_TO_EXPORT,
            details={"view_id": view_id, "dataset": dataset, "row_count": 0},
        )

    file = sanitize_filename(file_name, format, fallback=default_filename(title, generated_at))
    checksum = checksum_bytes(result.content)
    metrics.record_export(dataset=dataset, format=format, outcome="exported")
    log_json(
        logger,
        {
            "event": "view_export",
            "trace_id": getattr(request.state, "trace_id", ""),
            "view_id": view_id,
            "dataset": dataset,
            "format": format,
            "row_count": result.row_count,
            "file_size_bytes": len(result.content),
            "checksum_sha256": checksum,
        },
    )
    return Response(
        content=result.content,
        media_type=CONTENT_TYPES[format],
        headers={
            "Content-Disposition": f'attachment; filename="{file}"',
            "X-Export-Row-Count": str(result.row_count),
            "X-Checksum-SHA256": checksum,
        },
    )

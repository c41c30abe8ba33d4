from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.masjid.core.logging import log_json
from app.masjid.core.metrics import metrics

logger = logging.getLogger("masjid.request")


def _route_template(request: Request) -> str:
    scope_route = request.scope.get("route")
    path = getattr(scope_route, "path", None) if scope_route is not None else None
    return path or request.url.path


def build_request_log_payload(
    *,
    request: Request,
    response: Response | None,
    latency_ms: float,
) -> dict:
    """Describe one handled request as a flat ``http_request`` event.

    ``dataset`` and ``op`` are filled in by the listing routers through
    ``request.state``; the error fields by the exception handlers.
    """
    state = request.state
    return {
        "event": "http_request",
        "trace_id": getattr(state, "trace_id", ""),
        "view_id": request.path_params.get("view_id"),
        "dataset": getattr(state, "dataset", None),
        "op": getattr(state, "view_op", None),
        "route": _route_template(request),
        "method": request.method,
        "status_code": getattr(response, "status_code", 500),
        "latency_ms": round(latency_ms, 2),
        "error_code": getattr(state, "error_code", None),
        "error_class": getattr(state, "error_class", None),
    }


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            latency_ms = (time.perf_counter() - started) * 1000
            payload = build_request_log_payload(request=request, response=response, latency_ms=latency_ms)
            level = logging.ERROR if payload["status_code"] >= 500 else logging.INFO
            log_json(logger, payload, level=level)
            metrics.record_http_request(
                route=payload["route"],
                method=payload["method"],
                status_code=payload["status_code"],
                latency_ms=latency_ms,
            )

from fastapi import APIRouter, Depends, Request, Response

from app.masjid.core.config import settings
from app.masjid.core.metrics import metrics
from app.masjid.services.views import ViewSessionStore, get_view_sessions

router = APIRouter()


@router.get("/masjid/ops/metrics")
def get_metrics():
    snapshot = metrics.render()
    return Response(content=snapshot.content, media_type=snapshot.content_type)


@router.get("/masjid/ops/views")
def get_view_summary(request: Request, sessions: ViewSessionStore = Depends(get_view_sessions)):
    open_views = sessions.summary()
    return {
        "open_views": sum(open_views.values()),
        "by_dataset": open_views,
        "max_views": settings.VIEW_SESSIONS_MAX,
        "ttl_seconds": settings.VIEW_SESSION_TTL_SECONDS,
        "trace_id": getattr(request.state, "trace_id", ""),
    }

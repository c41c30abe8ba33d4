from fastapi import APIRouter, Depends, Request

from app.masjid.core.error_catalog import ErrorCatalog
from app.masjid.core.errors import error_response
from app.masjid.db.store import RecordStore, get_store
from app.masjid.services.datasets import list_datasets

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    trace_id = getattr(request.state, "trace_id", "")
    return {"status": "ok", "trace_id": trace_id}


@router.get("/ready")
async def ready(request: Request, store: RecordStore = Depends(get_store)):
    trace_id = getattr(request.state, "trace_id", "")
    loaded = set(store.datasets())
    missing = [definition.name for definition in list_datasets() if definition.name not in loaded]
    if missing:
        return error_response(
            code=ErrorCatalog.DATASET_NOT_FOUND.code,
            message="Datasets not loaded",
            details={"missing": missing},
            trace_id=trace_id,
            status_code=503,
        )
    return {"status": "ready", "datasets": sorted(loaded), "trace_id": trace_id}

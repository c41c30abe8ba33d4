from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.masjid.db.store import RecordStore, get_store
from app.masjid.schemas.records import ExpenseCreateRequest, RecordCreatedResponse, StaffCreateRequest
from app.masjid.schemas.views import DatasetItem, DatasetListResponse, DatasetResponse
from app.masjid.services.datasets import get_dataset, list_datasets
from app.masjid.services.records import RecordService
from app.masjid.services.views import ViewSessionStore, get_view_sessions

router = APIRouter()


def get_record_service(
    store: RecordStore = Depends(get_store),
    sessions: ViewSessionStore = Depends(get_view_sessions),
) -> RecordService:
    return RecordService(store, sessions)


@router.get("/masjid/datasets", response_model=DatasetListResponse)
def list_dataset_catalog(request: Request):
    return DatasetListResponse(
        datasets=[DatasetItem(**definition.describe()) for definition in list_datasets()],
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.get("/masjid/datasets/{dataset}", response_model=DatasetResponse)
def get_dataset_descriptor(request: Request, dataset: str):
    definition = get_dataset(dataset)
    return DatasetResponse(
        dataset=DatasetItem(**definition.describe()),
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.post("/masjid/datasets/expenses/records", response_model=RecordCreatedResponse, status_code=201)
def create_expense(
    request: Request,
    payload: ExpenseCreateRequest,
    service: RecordService = Depends(get_record_service),
):
    record, refreshed = service.add_expense(payload)
    return RecordCreatedResponse(
        dataset="expenses",
        record=record,
        refreshed_views=refreshed,
        trace_id=getattr(request.state, "trace_id", ""),
    )


@router.post("/masjid/datasets/staff/records", response_model=RecordCreatedResponse, status_code=201)
def create_staff_member(
    request: Request,
    payload: StaffCreateRequest,
    service: RecordService = Depends(get_record_service),
):
    record, refreshed = service.add_staff(payload)
    return RecordCreatedResponse(
        dataset="staff",
        record=record,
        refreshed_views=refreshed,
        trace_id=getattr(request.state, "trace_id", ""),
    )

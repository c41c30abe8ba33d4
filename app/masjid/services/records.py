from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any, Callable

from app.masjid.core.error_catalog import AppError, ErrorCatalog
from app.masjid.core.logging import log_json
from app.masjid.db.store import RecordStore
from app.masjid.schemas.records import ExpenseCreateRequest, StaffCreateRequest
from app.masjid.services.datasets import DatasetDefinition, get_dataset
from app.masjid.services.views import ViewSessionStore

logger = logging.getLogger("masjid.records")


def next_record_id(records: list[dict[str, Any]], prefix: str, *, width: int = 3) -> str:
    highest = 0
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    for record in records:
        match = pattern.match(str(record.get("id", "")))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:0{width}d}"


def _plain_amount(amount: Decimal) -> int | float:
    return int(amount) if amount == amount.to_integral_value() else float(amount)


class RecordService:
    def __init__(self, store: RecordStore, views: ViewSessionStore) -> None:
        self.store = store
        self.views = views

    def _insert(
        self,
        definition: DatasetDefinition,
        build_record: Callable[[list[dict[str, Any]]], dict[str, Any]],
    ) -> tuple[dict[str, Any], int]:
        # Views are refreshed under the store lock so they apply inserts in commit order.
        with self.store.write_lock():
            record, records = self.store.insert(definition.name, build_record)
            refreshed = self.views.refresh_dataset(definition, records)
        log_json(
            logger,
            {
                "event": "record_created",
                "dataset": definition.name,
                "record_id": record["id"],
                "refreshed_views": refreshed,
            },
        )
        return record, refreshed

    def add_expense(self, payload: ExpenseCreateRequest) -> tuple[dict[str, Any], int]:
        definition = get_dataset("expenses")

        def _build(existing: list[dict[str, Any]]) -> dict[str, Any]:
            return {
                "id": next_record_id(existing, "EXP-"),
                "date": payload.date.isoformat(),
                "category": payload.category,
                "payee": payload.payee,
                "description": payload.description.strip(),
                "amount": _plain_amount(payload.amount),
                "status": "Pending",
                "receipt": payload.has_receipt,
            }

        return self._insert(definition, _build)

    def add_staff(self, payload: StaffCreateRequest) -> tuple[dict[str, Any], int]:
        definition = get_dataset("staff")
        email = str(payload.email).lower()

        def _build(existing: list[dict[str, Any]]) -> dict[str, Any]:
            if any(str(item.get("email", "")).lower() == email for item in existing):
                raise AppError(ErrorCatalog.DUPLICATE_RECORD, details={"dataset": definition.name, "email": email})
            return {
                "id": next_record_id(existing, "emp_", width=1),
                "name": f"{payload.first_name.strip()} {payload.last_name.strip()}",
                "email": email,
                "role": payload.role.strip(),
                "status": "active",
                "phone": payload.phone_number,
                "hire_date": payload.joined_date.isoformat(),
            }

        return self._insert(definition, _build)

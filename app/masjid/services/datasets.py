from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from app.masjid.core.error_catalog import AppError, ErrorCatalog
from app.masjid.table.columns import (
    ColumnDescriptor,
    custom_filter_column,
    date_column,
    enum_column,
    number_column,
    text_column,
)
from app.masjid.table.filters import parse_number
from app.masjid.table.sorting import SortKey

# Arrears risk bands by months due: lower bound inclusive, upper bound exclusive. None means open-ended.
RISK_BANDS: dict[str, tuple[int, int | None]] = {
    "high": (6, None),
    "medium": (3, 6),
    "low": (0, 3),
}


def risk_band_matches(months_due: Any, band: Any) -> bool:
    bounds = RISK_BANDS.get(str(band).strip().lower())
    if bounds is None:
        return True
    months = parse_number(months_due)
    if months is None:
        return False
    low, high = bounds
    return months >= low and (high is None or months < high)


def _invoice_total(record: dict[str, Any]) -> dict[str, Any]:
    amount = parse_number(record.get("amount"))
    arrears = parse_number(record.get("arrears"))
    total = (amount or 0) + (arrears or 0)
    record["total"] = int(total) if total == int(total) else float(total)
    return record


@dataclass(frozen=True)
class DatasetDefinition:
    name: str
    title: str
    columns: tuple[ColumnDescriptor, ...]
    key_field: str = "id"
    total_column: str | None = "amount"
    default_sort: SortKey | None = None
    derive: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    writable: bool = False

    def prepare(self, records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        prepared = [dict(record) for record in records]
        if self.derive is None:
            return prepared
        return [self.derive(record) for record in prepared]

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "key_field": self.key_field,
            "total_column": self.total_column,
            "default_sort": self.default_sort.snapshot() if self.default_sort else None,
            "writable": self.writable,
            "columns": [column.describe() for column in self.columns],
        }


INVOICES = DatasetDefinition(
    name="invoices",
    title="Monthly Invoices",
    columns=(
        text_column("id", "Invoice No"),
        text_column("member_id", "Member ID"),
        text_column("name", "Member", search=True),
        number_column("amount", "Amount"),
        number_column("arrears", "Arrears"),
        number_column("total", "Total Due"),
        enum_column("status", "Status", choices=("Unpaid", "Paid", "Overdue")),
        date_column("due_date", "Due Date", range_filter=True),
    ),
    total_column="total",
    derive=_invoice_total,
)

EXPENSES = DatasetDefinition(
    name="expenses",
    title="Expenses Report",
    columns=(
        text_column("id", "Expense ID", exportable=False),
        date_column("date", "Date", range_filter=True),
        enum_column("category", "Category", choices=("Utilities", "Salaries", "Maintenance", "Events")),
        text_column("payee", "Payee", search=True),
        text_column("description", "Description", search=True, sortable=False),
        number_column("amount", "Amount", range_filter=True),
        enum_column("status", "Status", choices=("Paid", "Pending")),
        ColumnDescriptor(key="receipt", label="Receipt", value_type="bool", filter_kind="enum", exportable=False),
    ),
    default_sort=SortKey(column="date", direction="desc"),
    writable=True,
)

INCOME = DatasetDefinition(
    name="income",
    title="Full Income History",
    columns=(
        text_column("id", "Transaction ID"),
        date_column("date", "Date", range_filter=True),
        enum_column("source", "Source", choices=("Sanda", "Donation")),
        text_column("reference", "Reference", search=True),
        enum_column("category", "Category"),
        enum_column("method", "Method", choices=("Cash", "Bank Transfer", "Online")),
        number_column("amount", "Amount", range_filter=True),
    ),
    default_sort=SortKey(column="date", direction="desc"),
)

ARREARS = DatasetDefinition(
    name="arrears",
    title="Outstanding Arrears",
    columns=(
        text_column("id", "Member ID"),
        text_column("name", "Member Details", search=True),
        text_column("phone", "Phone", sortable=False),
        number_column("arrears", "Arrears Amount", range_filter=True),
        custom_filter_column(
            "months_due",
            "Pending Duration",
            risk_band_matches,
            value_type="number",
            choices=tuple(RISK_BANDS),
        ),
        date_column("last_paid", "Last Paid"),
        enum_column("status", "Status", choices=("Active", "Moved")),
    ),
    total_column="arrears",
    default_sort=SortKey(column="arrears", direction="desc"),
)

DONATIONS = DatasetDefinition(
    name="donations",
    title="Donations",
    columns=(
        text_column("id", "Donation ID", exportable=False),
        text_column("donor_name", "Donor", search=True),
        enum_column("purpose", "Purpose", choices=("Building Fund", "General", "Zakat", "Jummah")),
        number_column("amount", "Amount", range_filter=True),
        date_column("date", "Date", range_filter=True),
        enum_column("method", "Method", choices=("Cash", "Bank Transfer")),
        enum_column("type", "Type", choices=("One-time", "Recurring")),
    ),
    default_sort=SortKey(column="date", direction="desc"),
)

STAFF = DatasetDefinition(
    name="staff",
    title="Staff Directory",
    columns=(
        text_column("id", "Staff ID", exportable=False),
        text_column("name", "Name", search=True),
        text_column("email", "Email", sortable=False),
        enum_column("role", "Role"),
        text_column("phone", "Phone", sortable=False),
        enum_column("status", "Status", choices=("active", "inactive")),
        date_column("hire_date", "Joined", range_filter=True),
    ),
    total_column=None,
    writable=True,
)

DATASETS: dict[str, DatasetDefinition] = {
    definition.name: definition for definition in (INVOICES, EXPENSES, INCOME, ARREARS, DONATIONS, STAFF)
}


def get_dataset(name: str) -> DatasetDefinition:
    definition = DATASETS.get(name)
    if definition is None:
        raise AppError(ErrorCatalog.DATASET_NOT_FOUND, details={"dataset": name})
    return definition


def list_datasets() -> list[DatasetDefinition]:
    return list(DATASETS.values())

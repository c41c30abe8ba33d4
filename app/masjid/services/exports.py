from __future__ import annotations

import csv
import hashlib
import io
import os
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Literal, Mapping, Sequence

from openpyxl import Workbook
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.masjid.core.config import settings
from app.masjid.table.engine import ExportSerializer
from app.masjid.table.view import sum_field

ExportFormat = Literal["csv", "xlsx", "pdf"]

CONTENT_TYPES: dict[str, str] = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}


def sanitize_filename(name: str | None, format: ExportFormat, *, fallback: str) -> str:
    if not name:
        return f"{fallback}.{format}"
    base = os.path.basename(name)
    base = re.sub(r"\.[^.]+$", "", base)
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._-")
    if not cleaned:
        cleaned = fallback
    return f"{cleaned}.{format}"


def default_filename(title: str, generated_at: datetime) -> str:
    stem = re.sub(r"[^A-Za-z0-9]+", "_", title).strip("_") or "export"
    return f"{stem}_{generated_at.strftime('%Y-%m-%d')}"


def checksum_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _format_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return value.quantize(Decimal("0.01"))
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _format_amount(value: Decimal) -> str:
    return f"{settings.CURRENCY_LABEL} {value:,.2f}"


def render_csv(rows: Sequence[Mapping[str, Any]], labels: Mapping[str, str], title: str) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    keys = list(labels)
    writer.writerow([labels[key] for key in keys])
    for row in rows:
        writer.writerow([_format_cell(row.get(key)) for key in keys])
    return buffer.getvalue().encode("utf-8")


def render_xlsx(rows: Sequence[Mapping[str, Any]], labels: Mapping[str, str], title: str) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "export"
    keys = list(labels)
    worksheet.append([labels[key] for key in keys])
    for row in rows:
        cells = []
        for key in keys:
            value = _format_cell(row.get(key))
            cells.append(float(value) if isinstance(value, Decimal) else value)
        worksheet.append(cells)
    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


def _draw_lines(pdf: canvas.Canvas, lines: Iterable[str], *, start_y: float, top_y: float, line_height: int) -> float:
    y = start_y
    for line in lines:
        if y < 72:
            pdf.showPage()
            pdf.setFont("Helvetica", 10)
            y = top_y
        pdf.drawString(72, y, line)
        y -= line_height
    return y


def render_pdf(
    rows: Sequence[Mapping[str, Any]],
    labels: Mapping[str, str],
    title: str,
    *,
    total_column: str | None = None,
    generated_at: datetime | None = None,
) -> bytes:
    """Render a letterhead document with one section per record.

    When ``total_column`` is given the document ends with the sum of that
    column over the exported rows.
    """
    generated_at = generated_at or datetime.now().astimezone()
    output = io.BytesIO()
    pdf = canvas.Canvas(output, pagesize=A4)
    pdf.setTitle(title)
    _width, height = A4
    top_y = height - 72

    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(72, top_y, settings.ORGANIZATION_NAME)
    pdf.setFont("Helvetica", 10)
    header = [
        settings.ORGANIZATION_ADDRESS,
        settings.ORGANIZATION_CONTACT,
        "",
        title,
        f"Generated at: {generated_at.isoformat(timespec='seconds')}",
        f"Records: {len(rows)}",
        "",
    ]
    y = _draw_lines(pdf, header, start_y=top_y - 18, top_y=top_y, line_height=14)

    for position, row in enumerate(rows, start=1):
        section = [f"#{position}"]
        section.extend(f"    {label}: {_format_cell(row.get(key))}" for key, label in labels.items())
        section.append("")
        y = _draw_lines(pdf, section, start_y=y, top_y=top_y, line_height=14)

    if total_column:
        label = labels.get(total_column, total_column)
        total = sum_field(list(rows), total_column)
        y = _draw_lines(pdf, [f"TOTAL {label.upper()}: {_format_amount(total)}"], start_y=y, top_y=top_y, line_height=14)

    pdf.showPage()
    pdf.save()
    return output.getvalue()


def serializer_for(
    format: ExportFormat,
    *,
    total_column: str | None = None,
    generated_at: datetime | None = None,
) -> ExportSerializer:
    if format == "csv":
        return render_csv
    if format == "xlsx":
        return render_xlsx
    if format == "pdf":
        def _render(rows, labels, title):
            return render_pdf(rows, labels, title, total_column=total_column, generated_at=generated_at)

        return _render
    raise ValueError(f"unsupported export format: {format}")

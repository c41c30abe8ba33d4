import csv
import hashlib
import io

from app.masjid.core.config import settings


def _export(client, view_id, **params):
    return client.get(f"/masjid/views/{view_id}/export", params=params)


def test_csv_export_contains_every_filtered_row(client, open_view):
    view_id = open_view("income", page_size=1, filters={"date": "2025-12-04"})["view_id"]

    response = _export(client, view_id, format="csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["X-Export-Row-Count"] == "2"
    assert response.headers["X-Checksum-SHA256"] == hashlib.sha256(response.content).hexdigest()
    assert 'filename="Full_Income_History_Dec_04_2025_' in response.headers["Content-Disposition"]

    rows = list(csv.reader(io.StringIO(response.content.decode("utf-8"))))
    assert rows[0] == ["Transaction ID", "Date", "Source", "Reference", "Category", "Method", "Amount"]
    assert [row[0] for row in rows[1:]] == ["INC-9002", "INC-9003"]


def test_export_file_name_is_sanitized(client, open_view):
    view_id = open_view("expenses")["view_id"]
    response = _export(client, view_id, format="csv", file_name="../December expenses.txt")
    assert response.status_code == 200
    assert response.headers["Content-Disposition"] == 'attachment; filename="December_expenses.csv"'


def test_export_with_no_matching_rows_is_a_conflict(client, open_view):
    view_id = open_view("expenses", filters={"payee": "nobody"})["view_id"]
    response = _export(client, view_id, format="pdf")
    assert response.status_code == 409
    payload = response.json()
    assert payload["code"] == "NOTHING_TO_EXPORT"
    assert payload["message"] == "No records to export based on current filters"
    assert payload["details"]["row_count"] == 0


def test_pdf_export(client, open_view):
    view_id = open_view("donations")["view_id"]
    response = _export(client, view_id, format="pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_xlsx_export(client, open_view):
    view_id = open_view("staff")["view_id"]
    response = _export(client, view_id, format="xlsx", file_name="staff")
    assert response.status_code == 200
    assert response.content.startswith(b"PK")
    assert response.headers["Content-Disposition"] == 'attachment; filename="staff.xlsx"'


def test_export_rejects_unknown_format(client, open_view):
    view_id = open_view("staff")["view_id"]
    response = _export(client, view_id, format="docx")
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_export_row_limit(client, open_view, monkeypatch):
    monkeypatch.setattr(settings, "EXPORTS_MAX_ROWS", 2)
    view_id = open_view("income")["view_id"]
    response = _export(client, view_id, format="csv")
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["details"]["reason_code"] == "EXPORT_ROWS_LIMIT_EXCEEDED"
    assert payload["details"]["row_count"] == 7


def test_export_of_unknown_view_returns_404(client):
    response = _export(client, "missing", format="csv")
    assert response.status_code == 404
    assert response.json()["code"] == "VIEW_NOT_FOUND"


def test_exports_are_counted_in_metrics(client, open_view):
    view_id = open_view("income")["view_id"]
    assert _export(client, view_id, format="csv").status_code == 200

    response = client.get("/masjid/ops/metrics")
    assert response.status_code == 200
    content = response.text
    assert "view_exports_total" in content
    assert 'dataset="income"' in content
    assert 'outcome="exported"' in content

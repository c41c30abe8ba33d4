import pytest

from app.masjid.core.config import settings
from app.masjid.core.error_catalog import AppError
from app.masjid.db.seed import SEED_EXPENSES, SEED_INCOME
from app.masjid.services.datasets import EXPENSES, INCOME
from app.masjid.services.views import ViewSessionStore, operation_name
from app.masjid.services.exports import render_csv
from app.masjid.table.state import SetFilter, SetPageSize, ToggleSelectAllFiltered


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value

    def advance(self, seconds):
        self.value += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def sessions(clock):
    return ViewSessionStore(ttl_seconds=60, max_sessions=3, now=clock)


def test_operation_name_is_snake_case():
    assert operation_name(SetFilter("status", "Paid")) == "set_filter"
    assert operation_name(ToggleSelectAllFiltered()) == "toggle_select_all_filtered"


def test_open_applies_default_sort_and_initial_filters(sessions):
    session, view = sessions.open(INCOME, SEED_INCOME, filters={"date": "2025-12-04"})
    assert session.dataset is INCOME
    assert view.filtered_count == 2
    assert [row["id"] for row in view.page_rows] == ["INC-9002", "INC-9003"]

    _session, view = sessions.open(INCOME, SEED_INCOME)
    assert view.page_rows[0]["id"] == "INC-9001"
    assert view.page_rows[-1]["id"] == "INC-9007"


def test_open_with_explicit_sort_overrides_default(sessions):
    _session, view = sessions.open(INCOME, SEED_INCOME, sort=("amount", "desc"))
    assert view.page_rows[0]["id"] == "INC-9002"


def test_session_expires_after_ttl(sessions, clock):
    session, _view = sessions.open(EXPENSES, SEED_EXPENSES)
    clock.advance(59)
    assert sessions.get(session.view_id) is session
    clock.advance(59)
    assert sessions.get(session.view_id) is session
    clock.advance(61)
    with pytest.raises(AppError) as excinfo:
        sessions.get(session.view_id)
    assert excinfo.value.error.code == "VIEW_NOT_FOUND"


def test_oldest_session_is_evicted_when_full(sessions, clock):
    opened = []
    for _ in range(4):
        session, _view = sessions.open(EXPENSES, SEED_EXPENSES)
        opened.append(session.view_id)
        clock.advance(1)
    with pytest.raises(AppError):
        sessions.get(opened[0])
    for view_id in opened[1:]:
        assert sessions.get(view_id).view_id == view_id


def test_apply_caps_page_size(sessions, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PAGE_SIZE", 2)
    session, _view = sessions.open(EXPENSES, SEED_EXPENSES)
    assert session.engine.state.page_size == 2
    _session, view = sessions.apply(session.view_id, SetPageSize(50))
    assert view.page_size == 2
    assert view.page_count == 2


def test_export_enforces_row_limit(sessions):
    session, _view = sessions.open(EXPENSES, SEED_EXPENSES)
    with pytest.raises(AppError) as excinfo:
        sessions.export(session.view_id, render_csv, max_rows=3)
    assert excinfo.value.details["reason_code"] == "EXPORT_ROWS_LIMIT_EXCEEDED"

    _session, result = sessions.export(session.view_id, render_csv, max_rows=4)
    assert result.row_count == 4


def test_close_removes_session(sessions):
    session, _view = sessions.open(EXPENSES, SEED_EXPENSES)
    sessions.close(session.view_id)
    with pytest.raises(AppError):
        sessions.get(session.view_id)
    with pytest.raises(AppError):
        sessions.close(session.view_id)


def test_refresh_dataset_updates_only_matching_views(sessions):
    expenses, _view = sessions.open(EXPENSES, SEED_EXPENSES)
    income, _view = sessions.open(INCOME, SEED_INCOME)
    sessions.apply(expenses.view_id, SetFilter("status", "Pending"))

    records = [*SEED_EXPENSES, {"id": "EXP-005", "date": "2025-12-06", "category": "Events", "payee": "Hall", "description": "", "amount": 100, "status": "Pending", "receipt": False}]
    refreshed = sessions.refresh_dataset(EXPENSES, records)

    assert refreshed == 1
    _session, view = sessions.current_view(expenses.view_id)
    assert view.total_count == 5
    assert view.filtered_count == 2
    assert sessions.current_view(income.view_id)[1].total_count == 7

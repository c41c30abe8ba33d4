import pytest
from fastapi.testclient import TestClient

from app.masjid.core.metrics import metrics
from app.masjid.db.store import store
from app.masjid.services.views import view_sessions


def _reset_state():
    store.clear()
    view_sessions.clear()
    metrics.reset()


@pytest.fixture()
def client():
    _reset_state()
    from app.main import create_app

    app = create_app()
    with TestClient(app) as client:
        yield client
    _reset_state()


@pytest.fixture()
def open_view(client):
    def _open(dataset: str, **payload):
        response = client.post("/masjid/views", json={"dataset": dataset, **payload})
        assert response.status_code == 201, response.text
        return response.json()

    return _open

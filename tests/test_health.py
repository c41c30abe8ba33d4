def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["trace_id"]


def test_health_echoes_incoming_trace_id(client):
    response = client.get("/health", headers={"X-Trace-ID": "trace-abc"})
    assert response.status_code == 200
    assert response.headers["X-Trace-ID"] == "trace-abc"
    assert response.json()["trace_id"] == "trace-abc"

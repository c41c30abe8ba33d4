def test_list_datasets(client):
    response = client.get("/masjid/datasets")
    assert response.status_code == 200
    payload = response.json()
    names = [item["name"] for item in payload["datasets"]]
    assert names == ["invoices", "expenses", "income", "arrears", "donations", "staff"]
    writable = {item["name"] for item in payload["datasets"] if item["writable"]}
    assert writable == {"expenses", "staff"}
    assert payload["trace_id"]


def test_get_dataset_describes_columns(client):
    response = client.get("/masjid/datasets/arrears")
    assert response.status_code == 200
    dataset = response.json()["dataset"]
    assert dataset["total_column"] == "arrears"
    assert dataset["default_sort"] == {"column": "arrears", "direction": "desc"}

    columns = {column["key"]: column for column in dataset["columns"]}
    assert columns["months_due"]["filter_kind"] == "custom"
    assert columns["months_due"]["choices"] == ["high", "medium", "low"]
    assert columns["phone"]["sortable"] is False
    assert columns["phone"]["filterable"] is False
    assert columns["arrears"]["filter_kind"] == "number_range"


def test_get_unknown_dataset(client):
    response = client.get("/masjid/datasets/unknown")
    assert response.status_code == 404
    payload = response.json()
    assert payload["code"] == "DATASET_NOT_FOUND"
    assert payload["trace_id"]

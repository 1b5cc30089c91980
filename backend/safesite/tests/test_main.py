from .conftest import client


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["service"] == "SafeSite API"
    assert "timestamp" in data


def test_index_lists_endpoints(client):
    data = client.get("/").json()
    assert data["endpoints"]["protocols"] == "/api/protocols"
    assert data["endpoints"]["hazardZones"] == "/api/hazard-zones"


def test_metrics_endpoint(client):
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "request_count" in resp.text


def test_validation_errors_are_structured(client):
    resp = client.post("/api/auth/register", json={"username": "ab"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["detail"] == "Validation failed"
    assert body["errors"]
    assert all({"loc", "msg", "type"} <= set(err) for err in body["errors"])

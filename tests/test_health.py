from datetime import datetime, timedelta


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "OK"
    assert payload["environment"] == "production"
    current_time = datetime.fromisoformat(payload["current_time"].replace("Z", "+00:00"))
    assert current_time.utcoffset() == timedelta(0)


def test_root_lists_endpoints(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "POST /api/payfast/notify" in response.json()["endpoints"]

def test_health_ok(client):
    r = client.get("/health")

    assert r.status_code == 200
    assert "charset=utf-8" in r.headers.get("content-type", "").lower()
    data = r.json()
    assert data["ok"] is True
    assert data["data"]["service"] == "MAINTRACK"


def test_db_ping(client):
    r = client.get("/db-ping")
    assert r.status_code == 200
    assert r.json()["data"] == {"db": "ok", "select1": 1}


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nope")
    assert r.status_code == 404
    body = r.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "NOT_FOUND"

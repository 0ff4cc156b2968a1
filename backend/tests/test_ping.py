from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from liftlog.main import app
from liftlog import main as app_main

client = TestClient(app)

def test_root():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "name": "liftlog API"}

def test_ping():
    r = client.get("/ping")
    assert r.status_code == 200
    assert r.json() == {"pong": True}

def test_healthz_ok_on_sqlite():
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_healthz_degraded_when_database_unreachable(monkeypatch):
    def unreachable():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))
    monkeypatch.setattr(app_main, "SessionLocal", unreachable)
    body = client.get("/healthz").json()
    assert body["status"] == "degraded"
    assert "connection refused" in body["error"]

def test_version_defaults_to_dev(monkeypatch):
    monkeypatch.delenv("API_VERSION", raising=False)
    assert client.get("/version").json() == {"version": "dev"}

def test_request_id_is_echoed():
    r = client.get("/ping", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"

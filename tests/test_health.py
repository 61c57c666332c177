from fastapi.testclient import TestClient

from catalog.errors import QueryError
from catalog.infra.storage_s3 import ObjectStore
from catalog.main import create_app


def test_health_online(client):
    r = client.get("/api/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "Online"
    assert body["database"] == "Connected"
    assert body["server_time"]
    assert body["environment"] == "test"


def test_health_head(client):
    assert client.head("/api/health").status_code == 200


def test_health_disconnected(client, gateway, monkeypatch):
    def boom(*args, **kwargs):
        raise QueryError("could not connect to server: Connection refused")

    monkeypatch.setattr(gateway, "query", boom)

    r = client.get("/api/health")

    assert r.status_code == 500
    assert r.json() == {
        "status": "Error",
        "database": "Disconnected",
        "error": "could not connect to server: Connection refused",
    }


def test_health_hides_connection_strings(client, gateway, monkeypatch):
    def boom(*args, **kwargs):
        raise QueryError("bad dsn postgresql://user:secret@db/catalog")

    monkeypatch.setattr(gateway, "query", boom)

    assert client.get("/api/health").json()["error"] == "db_error"


def test_health_and_list_work_without_bucket(settings, gateway, s3):
    app = create_app(settings, gateway=gateway, store=ObjectStore(s3, bucket="", region="us-east-1"))
    with TestClient(app) as client:
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/products").json() == []

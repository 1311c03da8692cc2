"""Tests for the operational endpoints and store-failure mapping."""

from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from database import get_db
from main import app


class UnreachableDatabase:
    """Database handle whose every operation fails like a down server."""

    name = "unreachable"

    def __getitem__(self, name):
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")

    def list_collection_names(self):
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Personal Finance Backend Running"}


def test_database_check_lists_collections(client, signup):
    signup()
    resp = client.get("/test")
    body = resp.json()
    assert resp.status_code == 200
    assert body["connection_status"] == "Connected"
    assert "users" in body["collections"]


def test_database_check_reports_failure(client):
    app.dependency_overrides[get_db] = lambda: UnreachableDatabase()
    resp = client.get("/test")
    assert resp.status_code == 200
    assert resp.json()["connection_status"] == "Not Connected"
    assert resp.json()["database"].startswith("❌ Error")


def test_store_failure_is_400_with_message(client):
    app.dependency_overrides[get_db] = lambda: UnreachableDatabase()
    resp = client.post("/api/register", json={"name": "Ana", "email": "ana@example.com", "password": "pw123456"})
    assert resp.status_code == 400
    assert "connection refused" in resp.json()["message"]


def test_missing_body_is_400(client):
    resp = client.post("/api/login")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Request body is required"}


def test_cors_headers_present(client):
    resp = client.get("/", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["access-control-allow-origin"] in ("*", "http://localhost:5173")


def test_startup_creates_indexes_on_overridden_store(db):
    db["users"].drop_indexes()
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as client:
        assert client.get("/").status_code == 200
    app.dependency_overrides.clear()
    unique = [spec for spec in db["users"].index_information().values() if spec.get("unique")]
    assert unique and unique[0]["key"] == [("email", 1)]


def test_startup_survives_unreachable_store():
    app.dependency_overrides[get_db] = lambda: UnreachableDatabase()
    try:
        with TestClient(app) as client:
            assert client.get("/").status_code == 200
            resp = client.get("/test")
            assert resp.status_code == 200
            assert resp.json()["connection_status"] == "Not Connected"
    finally:
        app.dependency_overrides.clear()

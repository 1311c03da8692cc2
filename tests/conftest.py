"""
Shared fixtures.

mongomock stands in for the MongoDB server; the app's ``get_db`` dependency is
overridden so every request in a test sees the same in-memory database.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import COLL_USER, ensure_indexes, get_db
from main import app


@pytest.fixture
def db():
    database = mongomock.MongoClient()["personal_finance_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client, db):
    """Register and log in a user; returns (auth headers, user id)."""

    def _signup(email="ana@example.com", password="s3cret-pass", name="Ana"):
        resp = client.post("/api/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        user_id = str(db[COLL_USER].find_one({"email": email})["_id"])
        return {"Authorization": f"Bearer {resp.json()['token']}"}, user_id

    return _signup

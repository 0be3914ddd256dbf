import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app


@pytest.fixture
def db():
    return mongomock.MongoClient()["sales"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(client):
    def _make(name="Widget", price=9.99):
        resp = client.post("/products", json={"name": name, "price": price})
        assert resp.status_code == 201
        return resp.json()
    return _make


@pytest.fixture
def make_customer(client):
    def _make(name="Ada", address="1 Main St"):
        resp = client.post("/customers", json={"name": name, "address": address})
        assert resp.status_code == 201
        return resp.json()
    return _make

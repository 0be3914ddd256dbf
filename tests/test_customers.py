import pytest
from bson import ObjectId


def test_create_customer(client):
    resp = client.post("/customers", json={"name": "Ada", "address": "1 Main St"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Ada"
    assert body["address"] == "1 Main St"
    assert ObjectId.is_valid(body["id"])


def test_create_customer_requires_address(client):
    assert client.post("/customers", json={"name": "Ada", "address": ""}).status_code == 400
    assert client.post("/customers", json={"name": "Ada"}).status_code == 400


def test_search_customers_by_name(client, make_customer):
    make_customer("Ada Lovelace")
    make_customer("Grace Hopper")
    found = client.get("/customers", params={"name": "lovelace"}).json()
    assert [c["name"] for c in found] == ["Ada Lovelace"]
    assert len(client.get("/customers").json()) == 2


def test_update_customer_allow_list(client, make_customer):
    customer = make_customer()
    resp = client.put(f"/customers/{customer['id']}", json={"address": "2 High St"})
    assert resp.status_code == 200
    assert client.get(f"/customers/{customer['id']}").json()["address"] == "2 High St"

    resp = client.put(f"/customers/{customer['id']}", json={"price": 3})
    assert resp.status_code == 400


def test_delete_customer_messages_name_the_customer(client, make_customer):
    customer = make_customer()
    resp = client.delete(f"/customers/{customer['id']}")
    assert resp.status_code == 200
    assert "customer" in resp.json()["message"]

    resp = client.delete(f"/customers/{customer['id']}")
    assert resp.status_code == 404
    assert resp.text == f"No customer found with the provided ID: {customer['id']}"


@pytest.mark.parametrize("body", [{"name": None}, {"address": None}, {"address": ""}])
def test_update_customer_rejects_null_and_empty(client, make_customer, body):
    customer = make_customer()
    resp = client.put(f"/customers/{customer['id']}", json=body)
    assert resp.status_code == 400
    assert client.get(f"/customers/{customer['id']}").json() == customer

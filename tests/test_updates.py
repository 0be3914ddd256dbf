import pytest
from bson import ObjectId
from fastapi import HTTPException

from updates import apply_partial_update, validate_update


def test_validate_update_coerces_numbers():
    assert validate_update("products", {"price": 3, "amount": 7.0}) == {"price": 3.0, "amount": 7}


def test_validate_update_keeps_only_submitted_keys():
    assert validate_update("products", {"name": "Gizmo"}) == {"name": "Gizmo"}


@pytest.mark.parametrize("collection, payload, message", [
    ("products", {"status": "x"}, "Invalid update field: status"),
    ("customers", {"amount": 1}, "Invalid update field: amount"),
    ("orders", {"name": "x"}, "Invalid update field: name"),
    ("orders", {}, "No fields to update"),
])
def test_validate_update_rejects(collection, payload, message):
    with pytest.raises(HTTPException) as exc_info:
        validate_update(collection, payload)
    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == message


def test_validate_update_rejects_fractional_amount():
    with pytest.raises(HTTPException) as exc_info:
        validate_update("products", {"amount": 2.5})
    assert exc_info.value.status_code == 400
    assert "amount" in exc_info.value.detail


def test_apply_partial_update_not_found(db):
    with pytest.raises(HTTPException) as exc_info:
        apply_partial_update(db, "customers", ObjectId(), {"name": "Ada"})
    assert exc_info.value.status_code == 404


def test_apply_partial_update_sets_fields(db):
    oid = db["customers"].insert_one({"name": "Ada", "address": "1 Main St"}).inserted_id
    assert apply_partial_update(db, "customers", oid, {"address": "2 High St"}) == ["address"]
    assert db["customers"].find_one({"_id": oid}) == {"_id": oid, "name": "Ada", "address": "2 High St"}


def test_validate_update_rejects_out_of_range_amount():
    with pytest.raises(HTTPException) as exc_info:
        validate_update("products", {"amount": 2 ** 70})
    assert exc_info.value.status_code == 400
    assert "amount" in exc_info.value.detail

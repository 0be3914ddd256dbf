"""
Order routes.

Creating an order runs three separate round trips: customer lookup, product
lookup, insert. They are not wrapped in a transaction, so a customer or
product deleted between the lookup and the insert still ends up referenced
by the new order. References are only guaranteed valid at the moment they
were checked.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import APIRouter, Body, Depends
from pymongo.database import Database

from database import CUSTOMERS, ORDERS, PRODUCTS, create_document, get_db, get_documents, parse_object_id, serialize_doc, store_errors
from errors import BadInput, NotFound
from schemas import OrderCreate
from updates import apply_partial_update

logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"
DELIVERED_STATUS = "delivered"

router = APIRouter(prefix="/orders", tags=["orders"])


def check_references(db: Database, customer_id: ObjectId, product_id: ObjectId) -> Dict[str, Any]:
    """Make sure both referenced documents exist and return the product.

    The customer is looked up first; if it is missing or the lookup fails the
    product is never queried.
    """
    with store_errors("Error checking customer existence"):
        customer = db[CUSTOMERS].find_one({"_id": customer_id}, {"_id": 1})
    if customer is None:
        raise NotFound("Customer does not exist")

    with store_errors("Error checking product existence"):
        product = db[PRODUCTS].find_one({"_id": product_id})
    if product is None:
        raise NotFound("Product does not exist")

    return product


def compute_order(order: OrderCreate, price: float) -> Dict[str, Any]:
    total = price * order.amount
    if not math.isfinite(total):
        raise BadInput("Order sum is out of range")
    return {
        "amount": order.amount,
        "sum": total,
        "customer": ObjectId(order.customer),
        "product": ObjectId(order.product),
        "status": INITIAL_STATUS,
    }


def delivered_total(db: Database) -> float:
    pipeline = [
        {"$match": {"status": DELIVERED_STATUS}},
        {"$group": {"_id": None, "totalSum": {"$sum": "$sum"}}},
    ]
    with store_errors("Failed to aggregate delivered orders"):
        result = list(db[ORDERS].aggregate(pipeline))
    if not result:
        return 0
    return result[0]["totalSum"]


@router.post("", status_code=201)
def create_order(order: OrderCreate, db: Database = Depends(get_db)):
    product = check_references(db, ObjectId(order.customer), ObjectId(order.product))
    doc = compute_order(order, float(product.get("price", 0)))

    with store_errors("Failed to create order"):
        order_id = create_document(db, ORDERS, doc)

    logger.info("Created order %s: %d x product %s = %s", order_id, doc["amount"], order.product, doc["sum"])
    return serialize_doc({"_id": order_id, **doc})


@router.get("")
def list_orders(status: Optional[str] = None, db: Database = Depends(get_db)) -> List[Dict[str, Any]]:
    query = {"status": status} if status else {}
    with store_errors("Failed to retrieve documents from the database"):
        docs = get_documents(db, ORDERS, query)
    return [serialize_doc(d) for d in docs]


@router.get("/delivered/sum")
def get_delivered_sum(db: Database = Depends(get_db)):
    return {"totalSum": delivered_total(db)}


@router.get("/{order_id}")
def get_order(order_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(order_id)
    with store_errors("Failed to retrieve order"):
        doc = db[ORDERS].find_one({"_id": oid})
    if not doc:
        raise NotFound("No order found with the given ID")
    return serialize_doc(doc)


@router.put("/{order_id}")
def update_order(order_id: str, payload: Any = Body(...), db: Database = Depends(get_db)):
    oid = parse_object_id(order_id)
    updated = apply_partial_update(db, ORDERS, oid, payload)
    return {"message": f"Order with id {order_id} fields updated successfully", "id": order_id, "updated": updated}


@router.delete("/{order_id}")
def delete_order(order_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(order_id)
    with store_errors("Failed to delete order"):
        result = db[ORDERS].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound(f"No order found with the provided ID: {order_id}")
    logger.info("Deleted order %s", order_id)
    return {"message": f"Deleted order with ID: {order_id}", "id": order_id}

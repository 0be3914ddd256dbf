"""
Partial updates shared by every resource.

Each collection gets one pydantic model listing its mutable fields. The
model does the numeric coercion (price -> float, amount -> int) and rejects
anything outside the allow-list before the store is touched.
"""

import logging
from typing import Any, Dict, List, Type

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo.database import Database

from database import CUSTOMERS, ORDERS, PRODUCTS, store_errors
from errors import BadInput, NotFound
from schemas import CustomerUpdate, OrderUpdate, ProductUpdate

logger = logging.getLogger(__name__)

UPDATE_MODELS: Dict[str, Type[BaseModel]] = {
    PRODUCTS: ProductUpdate,
    CUSTOMERS: CustomerUpdate,
    ORDERS: OrderUpdate,
}

ENTITY_NAMES = {
    PRODUCTS: "product",
    CUSTOMERS: "customer",
    ORDERS: "order",
}


def validate_update(collection_name: str, payload: Any) -> Dict[str, Any]:
    """Check a PUT body against the collection's allow-list and coerce its values.

    The whole body is rejected if a single key is not allowed; nothing is
    applied partially. The returned mapping has exactly the submitted keys.
    """
    model = UPDATE_MODELS[collection_name]
    if not isinstance(payload, dict):
        raise BadInput("Invalid request body")
    if not payload:
        raise BadInput("No fields to update")

    for key in payload:
        if key not in model.model_fields:
            raise BadInput(f"Invalid update field: {key}")

    try:
        update = model.model_validate(payload)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"])
        raise BadInput(f"Invalid value for '{field}': {err['msg']}")

    return update.model_dump(exclude_unset=True)


def apply_partial_update(db: Database, collection_name: str, object_id: ObjectId, payload: Any) -> List[str]:
    """Validate ``payload`` and $set it on the document with ``object_id``.

    Not found is decided by the matched count, so an update that leaves the
    values unchanged still succeeds.
    """
    changes = validate_update(collection_name, payload)
    entity = ENTITY_NAMES[collection_name]

    with store_errors(f"Failed to update {entity}"):
        result = db[collection_name].update_one({"_id": object_id}, {"$set": changes})
    if result.matched_count == 0:
        raise NotFound(f"No {entity} found with the provided ID")

    logger.info("Updated %s %s fields %s", entity, object_id, list(changes))
    return list(changes)

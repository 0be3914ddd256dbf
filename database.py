"""
Database helpers

A single MongoClient is shared by the whole process. pymongo keeps its own
connection pool behind it, so every call below leases a socket for the
duration of one round trip and hands it back, including on failure.
"""

import os
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import BadInput, StoreFailure

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "sales")
DATABASE_MAX_POOL_SIZE = int(os.getenv("DATABASE_MAX_POOL_SIZE", "50"))
DATABASE_TIMEOUT_MS = int(os.getenv("DATABASE_TIMEOUT_MS", "5000"))

PRODUCTS = "products"
CUSTOMERS = "customers"
ORDERS = "orders"

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def get_client() -> MongoClient:
    global _client
    with _client_lock:
        if _client is None:
            _client = MongoClient(
                DATABASE_URL,
                maxPoolSize=DATABASE_MAX_POOL_SIZE,
                serverSelectionTimeoutMS=DATABASE_TIMEOUT_MS,
            )
            logger.info("MongoDB client created for %s (pool size %d)", DATABASE_NAME, DATABASE_MAX_POOL_SIZE)
        return _client


def close_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
            logger.info("MongoDB client closed")


def get_db() -> Database:
    """FastAPI dependency returning the sales database."""
    return get_client()[DATABASE_NAME]


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Turn any driver error raised inside the block into a 500."""
    try:
        yield
    except PyMongoError as e:
        raise StoreFailure(message) from e


def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadInput("Invalid ObjectId format")


def serialize_doc(doc: Dict[str, Any]):
    if not doc:
        return doc
    out = {}
    for k, v in doc.items():
        if k == "_id":
            out["id"] = str(v)
        elif isinstance(v, ObjectId):
            out[k] = str(v)
        elif hasattr(v, "isoformat"):
            out[k] = v.isoformat()
        else:
            out[k] = v
    return out


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, assigning its _id right before the write. Returns the id as hex."""
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    doc["_id"] = ObjectId()
    db[collection_name].insert_one(doc)
    return str(doc["_id"])


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)

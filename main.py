import os
import re
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from database import (
    CUSTOMERS,
    PRODUCTS,
    close_client,
    create_document,
    get_db,
    get_documents,
    parse_object_id,
    serialize_doc,
    store_errors,
)
from errors import NotFound, install_error_handlers
from orders import router as orders_router
from schemas import CustomerCreate, ProductCreate
from updates import apply_partial_update

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_client()


app = FastAPI(title="Sales API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)
app.include_router(orders_router)


def name_filter(name: Optional[str]) -> Dict[str, Any]:
    # literal, case-insensitive substring match
    if not name:
        return {}
    return {"name": {"$regex": re.escape(name), "$options": "i"}}


@app.get("/health")
def health():
    return Response(status_code=200)


# Products
@app.post("/products", status_code=201)
def create_product(payload: ProductCreate, db: Database = Depends(get_db)):
    doc = {"name": payload.name, "price": payload.price, "amount": 0}
    with store_errors("Failed to insert the product into the database"):
        product_id = create_document(db, PRODUCTS, doc)
    logger.info("Created product %s: %s, %s", product_id, payload.name, payload.price)
    return serialize_doc({"_id": product_id, **doc})


@app.get("/products")
def list_products(name: Optional[str] = None, db: Database = Depends(get_db)) -> List[Dict[str, Any]]:
    with store_errors("Failed to retrieve documents from the database"):
        docs = get_documents(db, PRODUCTS, name_filter(name))
    return [serialize_doc(d) for d in docs]


@app.get("/products/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(product_id)
    with store_errors("Failed to retrieve product"):
        doc = db[PRODUCTS].find_one({"_id": oid})
    if not doc:
        raise NotFound("No product found with the given ID")
    return serialize_doc(doc)


@app.put("/products/{product_id}")
def update_product(product_id: str, payload: Any = Body(...), db: Database = Depends(get_db)):
    oid = parse_object_id(product_id)
    updated = apply_partial_update(db, PRODUCTS, oid, payload)
    return {"message": f"Product with id {product_id} fields updated successfully", "id": product_id, "updated": updated}


@app.delete("/products/{product_id}")
def delete_product(product_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(product_id)
    with store_errors("Failed to delete product"):
        result = db[PRODUCTS].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound(f"No product found with the provided ID: {product_id}")
    logger.info("Deleted product %s", product_id)
    return {"message": f"Deleted product with ID: {product_id}", "id": product_id}


# Customers
@app.post("/customers", status_code=201)
def create_customer(payload: CustomerCreate, db: Database = Depends(get_db)):
    doc = payload.model_dump()
    with store_errors("Failed to insert customer into database"):
        customer_id = create_document(db, CUSTOMERS, doc)
    logger.info("Created customer %s: %s", customer_id, payload.name)
    return serialize_doc({"_id": customer_id, **doc})


@app.get("/customers")
def list_customers(name: Optional[str] = None, db: Database = Depends(get_db)) -> List[Dict[str, Any]]:
    with store_errors("Failed to retrieve documents from the database"):
        docs = get_documents(db, CUSTOMERS, name_filter(name))
    return [serialize_doc(d) for d in docs]


@app.get("/customers/{customer_id}")
def get_customer(customer_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(customer_id)
    with store_errors("Failed to retrieve customer"):
        doc = db[CUSTOMERS].find_one({"_id": oid})
    if not doc:
        raise NotFound("No customer found with the given ID")
    return serialize_doc(doc)


@app.put("/customers/{customer_id}")
def update_customer(customer_id: str, payload: Any = Body(...), db: Database = Depends(get_db)):
    oid = parse_object_id(customer_id)
    updated = apply_partial_update(db, CUSTOMERS, oid, payload)
    return {"message": f"Customer with id {customer_id} fields updated successfully", "id": customer_id, "updated": updated}


@app.delete("/customers/{customer_id}")
def delete_customer(customer_id: str, db: Database = Depends(get_db)):
    oid = parse_object_id(customer_id)
    with store_errors("Failed to delete customer"):
        result = db[CUSTOMERS].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound(f"No customer found with the provided ID: {customer_id}")
    logger.info("Deleted customer %s", customer_id)
    return {"message": f"Deleted customer with ID: {customer_id}", "id": customer_id}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)

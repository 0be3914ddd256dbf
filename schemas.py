"""
Database Schemas

Pydantic models for the payloads stored in the sales MongoDB collections:
products, customers and orders. The *Create models validate POST bodies,
the *Update models list the only fields a PUT may touch.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from bson import ObjectId

NIL_OBJECT_ID = "0" * 24

# amounts are stored as int32
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def require_number(value: Any) -> Any:
    """Only JSON numbers are accepted for numeric fields; no strings or booleans."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Expected a number")
    return value


def reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# products collection
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., gt=0, allow_inf_nan=False, description="Unit price")

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, value: Any) -> Any:
        return require_number(value)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    amount: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX, description="Units in stock")

    @field_validator("name", mode="before")
    @classmethod
    def check_not_null(cls, value: Any) -> Any:
        return reject_null(value)

    @field_validator("price", "amount", mode="before")
    @classmethod
    def check_number(cls, value: Any) -> Any:
        return require_number(value)


# customers collection
class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Customer name")
    address: str = Field(..., min_length=1, description="Customer address")


class CustomerUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)

    @field_validator("name", "address", mode="before")
    @classmethod
    def check_not_null(cls, value: Any) -> Any:
        return reject_null(value)


# orders collection
class OrderCreate(BaseModel):
    amount: int = Field(..., gt=0, le=INT32_MAX, description="Quantity ordered")
    customer: str = Field(..., validation_alias=AliasChoices("customer", "customerRef"), description="Referenced customer _id as hex")
    product: str = Field(..., validation_alias=AliasChoices("product", "productRef"), description="Referenced product _id as hex")

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value: Any) -> Any:
        return require_number(value)

    @field_validator("customer", "product")
    @classmethod
    def check_object_id(cls, value: str) -> str:
        if not ObjectId.is_valid(value) or value == NIL_OBJECT_ID:
            raise ValueError("must be a non-nil ObjectId hex string")
        return value


class OrderUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = Field(None, min_length=1, description="Order status")

    @field_validator("status", mode="before")
    @classmethod
    def check_not_null(cls, value: Any) -> Any:
        return reject_null(value)

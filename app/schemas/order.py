from datetime import datetime
from typing import Any

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field


class OrderItemIn(SQLModel):
    """
    One ordered line as submitted by the storefront.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str
    name: str
    price: int = Field(ge=0)
    quantity: int = Field(gt=0)
    size: str | None = None


class OrderCreate(SQLModel):
    """
    Payload for creating a demo order.

    The storefront sends its own total; the demo API checks it against
    the submitted items instead of trusting it blindly.
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str
    customer_email: EmailStr
    customer_phone: str | None = None
    shipping_address: str
    items: list[OrderItemIn] = Field(min_length=1)
    total: int = Field(ge=0)
    payment_method: str | None = None

    @field_validator("customer_name", "shipping_address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("customer_phone", "payment_method")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    """
    Order representation for clients.
    """

    id: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    shipping_address: str
    items: list[OrderItemIn]
    total: int
    # pending | paid | processing | shipped | delivered | cancelled, or any
    # other label an admin sets
    status: str
    payment_method: str | None
    created_at: datetime


class OrderStatusUpdate(SQLModel):
    """
    Payload to change order status.

    The value is not type-checked here so the service can answer a
    non-string status with 400 rather than a validation error.
    """

    model_config = ConfigDict(extra="forbid")

    status: Any = None

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Demo order.

    Line items are stored as a JSON snapshot (product id, name, unit
    price, quantity, optional size) so the order stays readable even if
    the catalog entry changes later.
    """

    __tablename__ = "orders"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True,
    )

    customer_name: str = Field(description="Name of the buyer")
    customer_email: str = Field(index=True)
    customer_phone: str | None = None

    shipping_address: str = Field(
        description="Full delivery address",
    )

    items: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON),
        description="Snapshot of ordered items",
    )

    total: int = Field(
        ge=0,
        description="Order total in minor units",
    )

    # pending | paid | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    payment_method: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

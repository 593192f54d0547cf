import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Demo catalog entry.

    Prices are stored in minor units (e.g. 2500000 == IDR 25,000.00),
    the same convention the commerce backend uses.
    """

    __tablename__ = "products"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the piece",
    )

    description: str = Field(
        default="",
        description="Long description shown on the product page",
    )

    price: int = Field(
        ge=0,
        description="Unit price in minor units",
    )

    # rings | necklaces | bracelets | earrings | ...
    category: str = Field(
        index=True,
        description="Category handle",
    )

    image_url: str | None = Field(
        default=None,
        description="Main image URL",
    )

    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON),
        description="Gallery image URLs",
    )

    material: str = Field(
        description="Material description, e.g. '14K Rose Gold'",
    )

    sizes: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON),
        description="Available sizes, if the piece is sized",
    )

    is_pre_order: bool = Field(default=False)
    in_stock: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

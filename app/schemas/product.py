from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a demo catalog product.

    - price is in minor units.
    - image_url defaults to the first gallery image when omitted.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=50)
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    material: str = Field(min_length=1)
    sizes: list[str] | None = None
    is_pre_order: bool = False
    in_stock: bool = True

    @field_validator("name", "category", "material")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("sizes")
    @classmethod
    def normalize_sizes(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        cleaned = [s.strip() for s in v if s.strip()]
        return cleaned or None


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: str
    name: str
    description: str
    price: int
    category: str
    image_url: str | None
    images: list[str]
    material: str
    sizes: list[str] | None
    is_pre_order: bool
    in_stock: bool
    created_at: datetime

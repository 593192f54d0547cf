# app/commerce/schemas.py
"""
Shapes returned by the commerce backend (Medusa store API).

Only the fields the storefront reads are declared; unknown fields are
ignored so backend upgrades don't break parsing. Amounts are integers in
minor units.
"""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class RemoteModel(SQLModel):
    model_config = ConfigDict(extra="ignore")


class Price(RemoteModel):
    id: str | None = None
    currency_code: str
    amount: int


class OptionRef(RemoteModel):
    id: str | None = None
    title: str


class OptionValue(RemoteModel):
    """
    One option value of a variant. `option_id` / `option` say which
    product option (Size, Material, ...) the value belongs to.
    """

    id: str | None = None
    value: str
    option_id: str | None = None
    option: OptionRef | None = None


class ProductOption(RemoteModel):
    id: str | None = None
    title: str
    values: list[OptionValue] = Field(default_factory=list)


class ProductVariant(RemoteModel):
    id: str
    product_id: str | None = None
    title: str | None = None
    sku: str | None = None
    inventory_quantity: int = 0
    prices: list[Price] = Field(default_factory=list)
    options: list[OptionValue] = Field(default_factory=list)
    # Present when the backend expands variant.product
    product: "Product | None" = None


class Image(RemoteModel):
    id: str | None = None
    url: str


class Category(RemoteModel):
    id: str
    name: str
    handle: str
    parent_category_id: str | None = None
    category_children: list["Category"] = Field(default_factory=list)


Category.model_rebuild()


class Collection(RemoteModel):
    id: str
    title: str
    handle: str


class Product(RemoteModel):
    id: str
    title: str
    handle: str | None = None
    description: str | None = None
    thumbnail: str | None = None
    images: list[Image] = Field(default_factory=list)
    variants: list[ProductVariant] = Field(default_factory=list)
    options: list[ProductOption] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    collection: Collection | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


ProductVariant.model_rebuild()


class Country(RemoteModel):
    iso_2: str
    name: str | None = None


class Region(RemoteModel):
    id: str
    name: str
    currency_code: str
    countries: list[Country] = Field(default_factory=list)


class Address(RemoteModel):
    id: str | None = None
    first_name: str
    last_name: str
    address_1: str
    address_2: str | None = None
    city: str
    country_code: str
    postal_code: str
    phone: str | None = None


class ShippingOption(RemoteModel):
    id: str
    name: str
    amount: int = 0


class ShippingMethod(RemoteModel):
    id: str
    shipping_option: ShippingOption | None = None
    price: int = 0


class PaymentSession(RemoteModel):
    id: str
    provider_id: str
    status: str
    data: dict[str, Any] = Field(default_factory=dict)


class LineItem(RemoteModel):
    id: str
    title: str
    description: str | None = None
    thumbnail: str | None = None
    variant: ProductVariant | None = None
    variant_id: str | None = None
    product_id: str | None = None
    quantity: int
    unit_price: int
    subtotal: int | None = None
    total: int | None = None


class Cart(RemoteModel):
    id: str
    email: str | None = None
    items: list[LineItem] = Field(default_factory=list)
    region: Region | None = None
    region_id: str | None = None
    shipping_address: Address | None = None
    billing_address: Address | None = None
    shipping_methods: list[ShippingMethod] = Field(default_factory=list)
    payment_session: PaymentSession | None = None
    subtotal: int = 0
    tax_total: int = 0
    shipping_total: int = 0
    discount_total: int = 0
    total: int = 0


class Customer(RemoteModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    shipping_addresses: list[Address] = Field(default_factory=list)
    created_at: datetime | None = None


class Order(RemoteModel):
    id: str
    display_id: int | None = None
    status: str
    fulfillment_status: str | None = None
    payment_status: str | None = None
    email: str | None = None
    items: list[LineItem] = Field(default_factory=list)
    shipping_address: Address | None = None
    billing_address: Address | None = None
    shipping_methods: list[ShippingMethod] = Field(default_factory=list)
    subtotal: int = 0
    tax_total: int = 0
    shipping_total: int = 0
    discount_total: int = 0
    total: int = 0
    created_at: datetime | None = None


class ProductPage(RemoteModel):
    products: list[Product]
    count: int
    limit: int | None = None
    offset: int | None = None


class OrderPage(RemoteModel):
    orders: list[Order]
    count: int

# app/commerce/catalog.py
"""
Flattened product view used by storefront pages.

The commerce backend models products as product -> variants -> prices
and options. Listing pages want one price, one category and a list of
sizes; `to_listing` derives that view and `variant_for_size` goes the
other way when a shopper picks a size.
"""

from datetime import datetime

from sqlmodel import SQLModel, Field

from app.commerce.schemas import OptionValue, Product, ProductVariant

DEFAULT_CATEGORY = "jewelry"
DEFAULT_MATERIAL = "Precious Metal"
SIZE_OPTION = "size"


class ProductListing(SQLModel):
    id: str
    name: str
    description: str = ""
    price: int = 0
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    material: str = DEFAULT_MATERIAL
    sizes: list[str] = Field(default_factory=list)
    in_stock: bool = False
    is_pre_order: bool = False
    default_variant_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _option_values(product: Product, title: str) -> list[str]:
    for option in product.options:
        if option.title.lower() == title:
            return [v.value for v in option.values]
    return []


def to_listing(product: Product) -> ProductListing:
    """
    Derive the listing view of a product.

    - price: first price of the first variant (minor units)
    - category: first category handle, else collection handle, else "jewelry"
    - material: "material" option, else first variant option value
    - sizes: values of the "size" option
    - in_stock: first variant has inventory
    """
    variant = product.variants[0] if product.variants else None
    price = variant.prices[0].amount if variant and variant.prices else 0

    if product.categories:
        category = product.categories[0].handle
    elif product.collection is not None:
        category = product.collection.handle
    else:
        category = DEFAULT_CATEGORY

    materials = _option_values(product, "material")
    if materials:
        material = materials[0]
    elif variant and variant.options:
        material = variant.options[0].value
    else:
        material = DEFAULT_MATERIAL

    return ProductListing(
        id=product.id,
        name=product.title,
        description=product.description or "",
        price=price,
        image_url=product.thumbnail,
        images=[img.url for img in product.images],
        category=category,
        material=material,
        sizes=_option_values(product, SIZE_OPTION),
        in_stock=bool(variant and variant.inventory_quantity > 0),
        default_variant_id=variant.id if variant else None,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _size_option_ids(product: Product | None) -> set[str] | None:
    if product is None:
        return None
    return {
        option.id
        for option in product.options
        if option.id and option.title.lower() == SIZE_OPTION
    }


def _is_size(value: OptionValue, size_ids: set[str] | None) -> bool | None:
    """True / False when the option is known, None when it can't be told."""
    if value.option is not None:
        return value.option.title.lower() == SIZE_OPTION
    if value.option_id and size_ids is not None:
        return value.option_id in size_ids
    return None


def variant_size(variant: ProductVariant, product: Product | None = None) -> str | None:
    """
    Size value of a variant.

    The size option is recognized by its option title ("Size"), or by
    option id against the product's options (`product`, else the
    expanded `variant.product`). A single option that can't be
    identified is taken to be the size.
    """
    size_ids = _size_option_ids(product or variant.product)
    verdicts = [_is_size(value, size_ids) for value in variant.options]
    for value, verdict in zip(variant.options, verdicts):
        if verdict:
            return value.value
    if len(verdicts) == 1 and verdicts[0] is None:
        return variant.options[0].value
    return None


def variant_for_size(product: Product, size: str | None = None) -> ProductVariant | None:
    """
    Pick the variant whose size option equals `size`.

    Without a size, the first variant is returned.
    """
    if not product.variants:
        return None
    if size is None:
        return product.variants[0]
    for variant in product.variants:
        if variant_size(variant, product) == size:
            return variant
    return None


def filter_by_category(listings: list[ProductListing], category: str | None) -> list[ProductListing]:
    if not category or category == "all":
        return listings
    return [item for item in listings if item.category == category]

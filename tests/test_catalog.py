"""Tests for the flattened product listing view"""
from app.commerce.catalog import (
    DEFAULT_CATEGORY,
    DEFAULT_MATERIAL,
    filter_by_category,
    to_listing,
    variant_for_size,
    variant_size,
)
from app.commerce.schemas import Product, ProductVariant

from conftest import PRODUCTS


def _product(index):
    return Product.model_validate(PRODUCTS[index])


def test_listing_from_sized_product():
    listing = to_listing(_product(0))

    assert listing.id == "prod_ring"
    assert listing.name == "Rose Gold Diamond Ring"
    assert listing.price == 2500000
    assert listing.category == "rings"
    assert listing.material == "14K Rose Gold"
    assert listing.sizes == ["6", "7"]
    assert listing.images == ["/img/ring.png"]
    assert listing.in_stock is True
    assert listing.default_variant_id == "variant_ring_6"


def test_listing_falls_back_to_collection_and_defaults():
    listing = to_listing(_product(1))

    assert listing.category == "classic"
    assert listing.material == DEFAULT_MATERIAL
    assert listing.description == ""
    assert listing.sizes == []
    assert listing.in_stock is False


def test_listing_of_bare_product():
    listing = to_listing(Product(id="prod_x", title="Bare"))

    assert listing.price == 0
    assert listing.category == DEFAULT_CATEGORY
    assert listing.default_variant_id is None
    assert listing.in_stock is False


def test_material_from_first_variant_option():
    product = Product.model_validate(
        {
            "id": "prod_chain",
            "title": "Chain",
            "variants": [{"id": "v1", "options": [{"value": "Sterling Silver"}]}],
        }
    )
    assert to_listing(product).material == "Sterling Silver"


def test_variant_for_size():
    product = _product(0)
    assert variant_for_size(product).id == "variant_ring_6"
    assert variant_for_size(product, "7").id == "variant_ring_7"
    assert variant_for_size(product, "12") is None
    assert variant_for_size(Product(id="prod_x", title="Bare")) is None


def test_variant_for_size_with_several_options():
    band = _product(2)
    assert variant_for_size(band, "6").id == "variant_band_6"
    assert variant_for_size(band, "7").id == "variant_band_7"
    assert variant_for_size(band, "Platinum") is None
    assert to_listing(band).sizes == ["6", "7"]


def test_variant_size_by_option_id():
    product = Product.model_validate(
        {
            "id": "prod_cuff",
            "title": "Cuff",
            "options": [
                {"id": "opt_metal", "title": "Metal"},
                {"id": "opt_size", "title": "Size"},
            ],
            "variants": [
                {
                    "id": "v_s",
                    "options": [
                        {"option_id": "opt_metal", "value": "Silver"},
                        {"option_id": "opt_size", "value": "S"},
                    ],
                },
                {
                    "id": "v_m",
                    "options": [
                        {"option_id": "opt_metal", "value": "Silver"},
                        {"option_id": "opt_size", "value": "M"},
                    ],
                },
            ],
        }
    )
    small, medium = product.variants

    assert variant_size(small, product) == "S"
    assert variant_for_size(product, "M") is medium
    # Without the product the option ids can't be resolved
    assert variant_size(small) is None


def test_variant_size_from_expanded_product():
    variant = ProductVariant.model_validate(
        {
            "id": "v_m",
            "options": [
                {"option_id": "opt_metal", "value": "Gold"},
                {"option_id": "opt_size", "value": "M"},
            ],
            "product": {
                "id": "prod_cuff",
                "title": "Cuff",
                "options": [
                    {"id": "opt_metal", "title": "Metal"},
                    {"id": "opt_size", "title": "Size"},
                ],
            },
        }
    )
    assert variant_size(variant) == "M"


def test_single_unlabelled_option_is_the_size():
    variant = ProductVariant(id="v1", options=[{"value": "7"}])
    assert variant_size(variant) == "7"


def test_filter_by_category():
    listings = [to_listing(_product(0)), to_listing(_product(1))]

    assert filter_by_category(listings, "rings") == [listings[0]]
    assert filter_by_category(listings, "all") == listings
    assert filter_by_category(listings, None) == listings
    assert filter_by_category(listings, "earrings") == []

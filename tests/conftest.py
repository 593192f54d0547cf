"""Pytest configuration and fixtures"""
import json
import os
import re
from itertools import count

import httpx
import pytest

# Set test environment variables before app settings are cached
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PAYMENT_DELAY_SECONDS", "0")
os.environ.setdefault("MEDUSA_BACKEND_URL", "http://commerce.test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.commerce.client import CommerceClient  # noqa: E402
from app.commerce.storage import MemoryStorage  # noqa: E402


REGIONS = [
    {
        "id": "reg_idr",
        "name": "Indonesia",
        "currency_code": "idr",
        "countries": [{"iso_2": "id", "name": "Indonesia"}],
    },
    {
        "id": "reg_us",
        "name": "United States",
        "currency_code": "usd",
        "countries": [{"iso_2": "us", "name": "United States"}],
    },
]


def _variant(variant_id, product_id, size, idr, usd, stock=5):
    return {
        "id": variant_id,
        "product_id": product_id,
        "title": size or "Default",
        "sku": variant_id.upper(),
        "inventory_quantity": stock,
        "prices": [
            {"id": f"price_{variant_id}_idr", "currency_code": "idr", "amount": idr},
            {"id": f"price_{variant_id}_usd", "currency_code": "usd", "amount": usd},
        ],
        "options": [{"value": size}] if size else [],
    }


def _band_variant(variant_id, size):
    # Variant options carry their product option, as the store API returns them
    return {
        "id": variant_id,
        "product_id": "prod_band",
        "title": f"Platinum / {size}",
        "inventory_quantity": 3,
        "prices": [
            {"currency_code": "idr", "amount": 4200000},
            {"currency_code": "usd", "amount": 28000},
        ],
        "options": [
            {
                "option_id": "opt_band_material",
                "value": "Platinum",
                "option": {"id": "opt_band_material", "title": "Material"},
            },
            {
                "option_id": "opt_band_size",
                "value": size,
                "option": {"id": "opt_band_size", "title": "Size"},
            },
        ],
    }



PRODUCTS = [
    {
        "id": "prod_ring",
        "title": "Rose Gold Diamond Ring",
        "handle": "rose-gold-diamond-ring",
        "description": "Handcrafted rose gold ring.",
        "thumbnail": "/img/ring.png",
        "images": [{"id": "img_1", "url": "/img/ring.png"}],
        "variants": [
            _variant("variant_ring_6", "prod_ring", "6", 2500000, 17000),
            _variant("variant_ring_7", "prod_ring", "7", 2500000, 17000),
        ],
        "options": [
            {"id": "opt_size", "title": "Size", "values": [{"value": "6"}, {"value": "7"}]},
            {"id": "opt_mat", "title": "Material", "values": [{"value": "14K Rose Gold"}]},
        ],
        "categories": [{"id": "pcat_rings", "name": "Rings", "handle": "rings"}],
        "collection": None,
    },
    {
        "id": "prod_necklace",
        "title": "Gold Pendant Necklace",
        "handle": "gold-pendant-necklace",
        "description": None,
        "thumbnail": None,
        "images": [],
        "variants": [_variant("variant_necklace", "prod_necklace", None, 1800000, 12000, stock=0)],
        "options": [],
        "categories": [],
        "collection": {"id": "pcol_classic", "title": "Classic", "handle": "classic"},
    },
    {
        "id": "prod_band",
        "title": "Platinum Wedding Band",
        "handle": "platinum-wedding-band",
        "description": "Comfort-fit platinum band.",
        "thumbnail": None,
        "images": [],
        "variants": [
            _band_variant("variant_band_6", "6"),
            _band_variant("variant_band_7", "7"),
        ],
        "options": [
            {"id": "opt_band_material", "title": "Material", "values": [{"value": "Platinum"}]},
            {"id": "opt_band_size", "title": "Size", "values": [{"value": "6"}, {"value": "7"}]},
        ],
        "categories": [{"id": "pcat_rings", "name": "Rings", "handle": "rings"}],
        "collection": None,
    },
]

SHIPPING_OPTIONS = [{"id": "so_standard", "name": "Standard", "amount": 2000000}]

DISCOUNTS = {"WELCOME10": 10}


class FakeCommerceBackend:
    """
    In-memory stand-in for the Medusa store API, served through
    httpx.MockTransport. Records every request it receives.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.carts: dict[str, dict] = {}
        self.customers: dict[str, dict] = {}
        self.passwords: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.fail_next: dict[tuple[str, str], tuple[int, dict]] = {}
        self._ids = count(1)
        self.variants = {
            v["id"]: (p, v) for p in PRODUCTS for v in p["variants"]
        }

    # ---- helpers ----

    def _id(self, prefix):
        return f"{prefix}_{next(self._ids)}"

    def fail(self, method, path_regex, status=500, body=None):
        """Make the next request matching method + path fail."""
        self.fail_next[(method, path_regex)] = (status, body or {"message": "boom"})

    def _currency(self, cart):
        return cart["region"]["currency_code"]

    def _recompute(self, cart):
        currency = self._currency(cart)
        subtotal = 0
        for item in cart["items"]:
            _, variant = self.variants[item["variant_id"]]
            price = next(p["amount"] for p in variant["prices"] if p["currency_code"] == currency)
            item["unit_price"] = price
            item["subtotal"] = item["total"] = price * item["quantity"]
            subtotal += item["subtotal"]
        percent = sum(DISCOUNTS[code] for code in cart["_discounts"])
        discount = subtotal * percent // 100
        shipping = sum(m["price"] for m in cart["shipping_methods"])
        cart["subtotal"] = subtotal
        cart["discount_total"] = discount
        cart["shipping_total"] = shipping
        cart["tax_total"] = 0
        cart["total"] = subtotal - discount + shipping

    def _public(self, cart):
        return {k: v for k, v in cart.items() if not k.startswith("_")}

    def _customer_for(self, request):
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        email = self.tokens.get(auth[len("Bearer "):])
        return self.customers.get(email) if email else None

    # ---- transport ----

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        for (fail_method, regex), (status, body) in list(self.fail_next.items()):
            if fail_method == method and re.fullmatch(regex, path):
                del self.fail_next[(fail_method, regex)]
                return httpx.Response(status, json=body)

        body = json.loads(request.content) if request.content else {}
        return self.route(method, path, request, body)

    def route(self, method, path, request, body):
        not_found = httpx.Response(404, json={"message": "Not found", "type": "not_found"})

        if method == "GET" and path == "/store/regions":
            return httpx.Response(200, json={"regions": REGIONS})

        if method == "GET" and path == "/store/products":
            q = request.url.params.get("q")
            products = [p for p in PRODUCTS if not q or q.lower() in p["title"].lower()]
            return httpx.Response(
                200,
                json={"products": products, "count": len(products), "limit": 12, "offset": 0},
            )

        m = re.fullmatch(r"/store/products/handle/([^/]+)", path)
        if method == "GET" and m:
            for p in PRODUCTS:
                if p["handle"] == m.group(1):
                    return httpx.Response(200, json={"product": p})
            return not_found

        m = re.fullmatch(r"/store/products/([^/]+)", path)
        if method == "GET" and m:
            for p in PRODUCTS:
                if p["id"] == m.group(1):
                    return httpx.Response(200, json={"product": p})
            return not_found

        if method == "POST" and path == "/store/carts":
            region_id = body.get("region_id") or REGIONS[0]["id"]
            region = next(r for r in REGIONS if r["id"] == region_id)
            cart = {
                "id": self._id("cart"),
                "email": None,
                "items": [],
                "region": region,
                "region_id": region["id"],
                "shipping_address": None,
                "billing_address": None,
                "shipping_methods": [],
                "payment_session": None,
                "_discounts": [],
                "_payment_sessions": [],
            }
            self._recompute(cart)
            self.carts[cart["id"]] = cart
            return httpx.Response(200, json={"cart": self._public(cart)})

        m = re.fullmatch(r"/store/carts/([^/]+)(/.*)?", path)
        if m:
            cart = self.carts.get(m.group(1))
            if cart is None:
                return not_found
            return self.cart_route(method, m.group(2) or "", cart, body)

        if method == "GET" and path == "/store/shipping-options":
            return httpx.Response(200, json={"shipping_options": SHIPPING_OPTIONS})

        if method == "POST" and path == "/store/customers":
            if body["email"] in self.customers:
                return httpx.Response(
                    422, json={"message": "Customer already exists", "code": "duplicate_error"}
                )
            customer = {
                "id": self._id("cus"),
                "email": body["email"],
                "first_name": body["first_name"],
                "last_name": body["last_name"],
                "phone": body.get("phone"),
                "shipping_addresses": [],
            }
            self.customers[body["email"]] = customer
            self.passwords[body["email"]] = body["password"]
            return httpx.Response(200, json={"customer": customer})

        if method == "POST" and path == "/store/auth/customer/emailpass":
            if self.passwords.get(body.get("email")) != body.get("password"):
                return httpx.Response(
                    401, json={"message": "Invalid email or password", "type": "unauthorized"}
                )
            token = self._id("tok")
            self.tokens[token] = body["email"]
            return httpx.Response(200, json={"token": token})

        if method == "DELETE" and path == "/store/auth":
            auth = request.headers.get("Authorization", "")
            self.tokens.pop(auth[len("Bearer "):], None)
            return httpx.Response(200, json={"success": True})

        if path.startswith("/store/customers/me"):
            customer = self._customer_for(request)
            if customer is None:
                return httpx.Response(401, json={"message": "Unauthorized"})
            return self.customer_route(method, path, customer, body)

        return not_found

    def cart_route(self, method, sub, cart, body):
        def ok():
            self._recompute(cart)
            return httpx.Response(200, json={"cart": self._public(cart)})

        if method == "GET" and sub == "":
            return ok()

        if method == "POST" and sub == "":
            if "region_id" in body:
                region = next(r for r in REGIONS if r["id"] == body["region_id"])
                cart["region"] = region
                cart["region_id"] = region["id"]
            for discount in body.get("discounts", []):
                if discount["code"] not in DISCOUNTS:
                    return httpx.Response(
                        400, json={"message": "Discount is not valid", "code": "invalid_discount"}
                    )
                cart["_discounts"].append(discount["code"])
            for key in ("email", "shipping_address", "billing_address"):
                if key in body:
                    cart[key] = body[key]
            return ok()

        if method == "POST" and sub == "/line-items":
            if body["variant_id"] not in self.variants:
                return httpx.Response(404, json={"message": "Variant not found"})
            product, variant = self.variants[body["variant_id"]]
            for item in cart["items"]:
                if item["variant_id"] == variant["id"]:
                    item["quantity"] += body["quantity"]
                    return ok()
            cart["items"].append(
                {
                    "id": self._id("item"),
                    "title": product["title"],
                    "description": product["description"],
                    "thumbnail": product["thumbnail"],
                    "variant_id": variant["id"],
                    "product_id": product["id"],
                    "variant": variant,
                    "quantity": body["quantity"],
                    "unit_price": 0,
                }
            )
            return ok()

        m = re.fullmatch(r"/line-items/([^/]+)", sub)
        if m:
            item = next((i for i in cart["items"] if i["id"] == m.group(1)), None)
            if item is None:
                return httpx.Response(404, json={"message": "Line item not found"})
            if method == "POST":
                item["quantity"] = body["quantity"]
                return ok()
            if method == "DELETE":
                cart["items"].remove(item)
                self._recompute(cart)
                return httpx.Response(
                    200, json={"id": item["id"], "deleted": True, "parent": self._public(cart)}
                )

        m = re.fullmatch(r"/discounts/([^/]+)", sub)
        if m and method == "DELETE":
            if m.group(1) in cart["_discounts"]:
                cart["_discounts"].remove(m.group(1))
            return ok()

        if method == "POST" and sub == "/shipping-methods":
            option = next(o for o in SHIPPING_OPTIONS if o["id"] == body["option_id"])
            cart["shipping_methods"] = [
                {"id": self._id("sm"), "shipping_option": option, "price": option["amount"]}
            ]
            return ok()

        if method == "POST" and sub == "/payment-sessions":
            cart["_payment_sessions"] = ["manual"]
            return ok()

        if method == "POST" and sub == "/payment-session":
            if body["provider_id"] not in cart["_payment_sessions"]:
                return httpx.Response(400, json={"message": "Unknown payment provider"})
            cart["payment_session"] = {
                "id": self._id("ps"),
                "provider_id": body["provider_id"],
                "status": "authorized",
                "data": {},
            }
            return ok()

        if method == "POST" and sub == "/complete":
            if cart["payment_session"] is None:
                return httpx.Response(
                    200,
                    json={
                        "type": "cart",
                        "cart": self._public(cart),
                        "error": {"message": "Payment not authorized", "type": "payment_authorization_error"},
                    },
                )
            self._recompute(cart)
            order = {
                "id": self._id("order"),
                "display_id": 1001,
                "status": "pending",
                "email": cart["email"],
                "items": cart["items"],
                "shipping_methods": cart["shipping_methods"],
                "subtotal": cart["subtotal"],
                "discount_total": cart["discount_total"],
                "shipping_total": cart["shipping_total"],
                "tax_total": 0,
                "total": cart["total"],
            }
            del self.carts[cart["id"]]
            return httpx.Response(200, json={"type": "order", "order": order})

        return httpx.Response(404, json={"message": "Not found"})

    def customer_route(self, method, path, customer, body):
        if path == "/store/customers/me":
            if method == "POST":
                customer.update(body)
            return httpx.Response(200, json={"customer": customer})

        if path == "/store/customers/me/addresses" and method == "POST":
            address = dict(body["address"], id=self._id("addr"))
            customer["shipping_addresses"].append(address)
            return httpx.Response(200, json={"customer": customer})

        m = re.fullmatch(r"/store/customers/me/addresses/([^/]+)", path)
        if m:
            addresses = customer["shipping_addresses"]
            address = next((a for a in addresses if a["id"] == m.group(1)), None)
            if address is None:
                return httpx.Response(404, json={"message": "Address not found"})
            if method == "DELETE":
                addresses.remove(address)
            else:
                address.update(body)
            return httpx.Response(200, json={"customer": customer})

        if path == "/store/customers/me/orders":
            return httpx.Response(200, json={"orders": [], "count": 0})

        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def backend():
    return FakeCommerceBackend()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def commerce_client(backend, storage):
    client = CommerceClient(
        "http://commerce.test",
        storage=storage,
        transport=httpx.MockTransport(backend.handler),
    )
    yield client
    client.close()


@pytest.fixture
def api_client():
    """Demo API test client with a fresh, re-seeded catalog"""
    from fastapi.testclient import TestClient
    from sqlmodel import SQLModel

    from app.core.deps import api_limiter, checkout_limiter
    from app.database import engine
    from app.main import app

    SQLModel.metadata.drop_all(engine)
    api_limiter.reset()
    checkout_limiter.reset()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()

# app/commerce/client.py
"""
HTTP client for the commerce backend (Medusa store API).

Each public method issues exactly one HTTP request and returns the parsed
result, or raises CommerceError carrying the HTTP status and the optional
provider error code. Retrying, clearing stale ids and notifying the user
are the caller's business (see cart_session / customer_session).

Every request carries:
  - Authorization: Bearer <token>   when a customer token is stored
  - x-publishable-api-key           when a publishable key is configured
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.commerce.errors import CommerceError
from app.commerce.schemas import (
    Address,
    Cart,
    Category,
    Collection,
    Customer,
    Order,
    OrderPage,
    Product,
    ProductPage,
    Region,
    ShippingOption,
)
from app.commerce.storage import TOKEN_KEY, LocalStorage, MemoryStorage
from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

PRODUCT_ID_PREFIX = "prod_"


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop None values; lists are kept so httpx repeats the key."""
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None}


class CommerceClient:
    """
    Thin wrapper around httpx.Client for the store API.

    Args:
        base_url: backend root, e.g. "http://localhost:9000".
        storage: local storage holding the customer token.
        publishable_key: optional store publishable key.
        timeout: request timeout in seconds.
        transport: optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        storage: LocalStorage | None = None,
        publishable_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.storage = storage if storage is not None else MemoryStorage()
        self.publishable_key = publishable_key
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        storage: LocalStorage | None = None,
        settings: Settings | None = None,
    ) -> "CommerceClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.MEDUSA_BACKEND_URL,
            storage=storage,
            publishable_key=settings.MEDUSA_PUBLISHABLE_KEY,
            timeout=settings.MEDUSA_TIMEOUT,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CommerceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Request helper
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        token = self.storage.get(TOKEN_KEY)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if self.publishable_key:
            headers["x-publishable-api-key"] = self.publishable_key
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            CommerceError: on non-2xx responses (status + optional code)
                or transport failures (status 0).
        """
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self._http.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.warning("Commerce request %s %s failed: %s", method, path, e)
            raise CommerceError(f"Network error: {e}", status=0) from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("message") or f"API Error: {response.status_code}"
            code = body.get("code") or body.get("type")
            logger.warning(
                "Commerce API %s %s -> %s (%s)",
                method,
                path,
                response.status_code,
                message,
            )
            raise CommerceError(message, status=response.status_code, code=code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise CommerceError(
                "Invalid JSON in response",
                status=response.status_code,
            ) from e

    @staticmethod
    def _cart(body: dict[str, Any]) -> Cart:
        # Line item deletes answer with {"parent": cart, "deleted": true}
        data = body.get("cart") or body.get("parent")
        if data is None:
            raise CommerceError("Response did not contain a cart", status=200)
        return Cart.model_validate(data)

    # ------------------------------------------------------------------
    # Store: products, categories, collections, regions
    # ------------------------------------------------------------------

    def list_products(
        self,
        limit: int | None = None,
        offset: int | None = None,
        q: str | None = None,
        category_id: list[str] | None = None,
        collection_id: list[str] | None = None,
        tags: list[str] | None = None,
        order: str | None = None,
    ) -> ProductPage:
        body = self.request(
            "GET",
            "/store/products",
            params={
                "limit": limit,
                "offset": offset,
                "q": q,
                "category_id": category_id,
                "collection_id": collection_id,
                "tags": tags,
                "order": order,
            },
        )
        return ProductPage.model_validate(body)

    def get_product(self, id_or_handle: str) -> Product:
        """
        Fetch a product by id (ids start with "prod_") or by handle.
        """
        if id_or_handle.startswith(PRODUCT_ID_PREFIX):
            path = f"/store/products/{quote(id_or_handle, safe='')}"
        else:
            path = f"/store/products/handle/{quote(id_or_handle, safe='')}"
        body = self.request("GET", path)
        return Product.model_validate(body["product"])

    def search_products(self, query: str) -> list[Product]:
        body = self.request("GET", "/store/products", params={"q": query})
        return [Product.model_validate(p) for p in body.get("products", [])]

    def list_categories(
        self,
        limit: int | None = None,
        offset: int | None = None,
        parent_category_id: str | None = None,
    ) -> list[Category]:
        body = self.request(
            "GET",
            "/store/product-categories",
            params={
                "limit": limit,
                "offset": offset,
                "parent_category_id": parent_category_id,
            },
        )
        return [Category.model_validate(c) for c in body.get("product_categories", [])]

    def get_category(self, category_id: str) -> Category:
        body = self.request("GET", f"/store/product-categories/{category_id}")
        return Category.model_validate(body["product_category"])

    def list_collections(
        self,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Collection]:
        body = self.request(
            "GET",
            "/store/collections",
            params={"limit": limit, "offset": offset},
        )
        return [Collection.model_validate(c) for c in body.get("collections", [])]

    def get_collection(self, collection_id: str) -> Collection:
        body = self.request("GET", f"/store/collections/{collection_id}")
        return Collection.model_validate(body["collection"])

    def list_regions(self) -> list[Region]:
        body = self.request("GET", "/store/regions")
        return [Region.model_validate(r) for r in body.get("regions", [])]

    def get_region(self, region_id: str) -> Region:
        body = self.request("GET", f"/store/regions/{region_id}")
        return Region.model_validate(body["region"])

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def create_cart(self, region_id: str | None = None) -> Cart:
        payload = {"region_id": region_id} if region_id else {}
        return self._cart(self.request("POST", "/store/carts", json=payload))

    def get_cart(self, cart_id: str) -> Cart:
        return self._cart(self.request("GET", f"/store/carts/{cart_id}"))

    def update_cart(self, cart_id: str, data: dict[str, Any]) -> Cart:
        """
        Partial cart update: email, shipping_address, billing_address,
        region_id, discounts.
        """
        return self._cart(self.request("POST", f"/store/carts/{cart_id}", json=data))

    def add_line_item(self, cart_id: str, variant_id: str, quantity: int) -> Cart:
        return self._cart(
            self.request(
                "POST",
                f"/store/carts/{cart_id}/line-items",
                json={"variant_id": variant_id, "quantity": quantity},
            )
        )

    def update_line_item(self, cart_id: str, line_item_id: str, quantity: int) -> Cart:
        return self._cart(
            self.request(
                "POST",
                f"/store/carts/{cart_id}/line-items/{line_item_id}",
                json={"quantity": quantity},
            )
        )

    def remove_line_item(self, cart_id: str, line_item_id: str) -> Cart:
        return self._cart(
            self.request("DELETE", f"/store/carts/{cart_id}/line-items/{line_item_id}")
        )

    def apply_discount(self, cart_id: str, code: str) -> Cart:
        return self.update_cart(cart_id, {"discounts": [{"code": code}]})

    def remove_discount(self, cart_id: str, code: str) -> Cart:
        return self._cart(
            self.request(
                "DELETE",
                f"/store/carts/{cart_id}/discounts/{quote(code, safe='')}",
            )
        )

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def set_addresses(
        self,
        cart_id: str,
        shipping_address: Address,
        billing_address: Address | None = None,
        email: str | None = None,
    ) -> Cart:
        """
        Set shipping (and billing, defaulting to shipping) address on a cart.
        """
        shipping = shipping_address.model_dump(exclude_none=True, exclude={"id"})
        billing = (
            billing_address.model_dump(exclude_none=True, exclude={"id"})
            if billing_address is not None
            else shipping
        )
        data: dict[str, Any] = {
            "shipping_address": shipping,
            "billing_address": billing,
        }
        if email:
            data["email"] = email
        return self.update_cart(cart_id, data)

    def list_shipping_options(self, cart_id: str) -> list[ShippingOption]:
        body = self.request(
            "GET",
            "/store/shipping-options",
            params={"cart_id": cart_id},
        )
        return [ShippingOption.model_validate(o) for o in body.get("shipping_options", [])]

    def add_shipping_method(self, cart_id: str, option_id: str) -> Cart:
        return self._cart(
            self.request(
                "POST",
                f"/store/carts/{cart_id}/shipping-methods",
                json={"option_id": option_id},
            )
        )

    def create_payment_sessions(self, cart_id: str) -> Cart:
        return self._cart(self.request("POST", f"/store/carts/{cart_id}/payment-sessions"))

    def select_payment_session(self, cart_id: str, provider_id: str) -> Cart:
        return self._cart(
            self.request(
                "POST",
                f"/store/carts/{cart_id}/payment-session",
                json={"provider_id": provider_id},
            )
        )

    def update_payment_session(
        self,
        cart_id: str,
        provider_id: str,
        data: dict[str, Any],
    ) -> Cart:
        return self._cart(
            self.request(
                "POST",
                f"/store/carts/{cart_id}/payment-sessions/{provider_id}",
                json={"data": data},
            )
        )

    def complete_cart(self, cart_id: str) -> Order:
        """
        Complete checkout and return the created order.

        The backend answers 200 with {"type": "cart", "error": ...} when
        the cart cannot be completed (e.g. payment not authorized); that
        is raised as CommerceError(409).
        """
        body = self.request("POST", f"/store/carts/{cart_id}/complete")
        if body.get("type") != "order" or "order" not in body:
            error = body.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise CommerceError(
                message or "Cart could not be completed",
                status=409,
                code=(error.get("type") if isinstance(error, dict) else None)
                or "cart_not_completed",
            )
        return Order.model_validate(body["order"])

    # ------------------------------------------------------------------
    # Customer
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
    ) -> Customer:
        payload = {
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
        }
        if phone:
            payload["phone"] = phone
        body = self.request("POST", "/store/customers", json=payload)
        return Customer.model_validate(body["customer"])

    def login(self, email: str, password: str) -> str:
        """
        Authenticate with email/password and persist the bearer token.
        """
        body = self.request(
            "POST",
            "/store/auth/customer/emailpass",
            json={"email": email, "password": password},
        )
        token = body.get("token")
        if not token:
            raise CommerceError("Login response did not contain a token", status=200)
        self.storage.set(TOKEN_KEY, token)
        return token

    def logout(self) -> None:
        """
        End the remote session. The local token is removed even when the
        remote call fails; the error still propagates.
        """
        try:
            self.request("DELETE", "/store/auth")
        finally:
            self.storage.remove(TOKEN_KEY)

    def is_authenticated(self) -> bool:
        return bool(self.storage.get(TOKEN_KEY))

    def get_customer(self) -> Customer:
        body = self.request("GET", "/store/customers/me")
        return Customer.model_validate(body["customer"])

    def update_customer(self, data: dict[str, Any]) -> Customer:
        """
        Partial profile update: first_name, last_name, phone, password.
        """
        body = self.request("POST", "/store/customers/me", json=data)
        return Customer.model_validate(body["customer"])

    def add_address(self, address: Address) -> Customer:
        body = self.request(
            "POST",
            "/store/customers/me/addresses",
            json={"address": address.model_dump(exclude_none=True, exclude={"id"})},
        )
        return Customer.model_validate(body["customer"])

    def update_address(self, address_id: str, data: dict[str, Any]) -> Customer:
        body = self.request(
            "POST",
            f"/store/customers/me/addresses/{address_id}",
            json=data,
        )
        return Customer.model_validate(body["customer"])

    def delete_address(self, address_id: str) -> Customer:
        body = self.request("DELETE", f"/store/customers/me/addresses/{address_id}")
        return Customer.model_validate(body["customer"])

    def list_orders(
        self,
        limit: int | None = None,
        offset: int | None = None,
    ) -> OrderPage:
        body = self.request(
            "GET",
            "/store/customers/me/orders",
            params={"limit": limit, "offset": offset},
        )
        return OrderPage.model_validate(body)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        body = self.request("GET", f"/store/orders/{order_id}")
        return Order.model_validate(body["order"])

    def lookup_order(self, display_id: int, email: str) -> Order:
        body = self.request(
            "GET",
            f"/store/orders/batch/customer/{display_id}",
            params={"email": email},
        )
        return Order.model_validate(body["order"])

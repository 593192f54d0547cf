# app/commerce/cart_session.py
"""
Session cart: local mirror of the remote cart.

The remote cart is the only source of truth for items, prices, discounts
and totals. Every mutation follows the same path:

    ensure a cart id (create one if missing)
      -> perform the mutation remotely
      -> re-fetch the full cart
      -> replace the in-memory state

Nothing is updated optimistically.

States: uninitialized -> loading -> {empty, populated, error}

Re-fetches are numbered. A response belonging to an older re-fetch than
the last one applied is dropped, so with overlapping requests the newest
re-fetch wins rather than whichever response happens to arrive last.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from app.commerce.catalog import variant_for_size, variant_size
from app.commerce.client import CommerceClient
from app.commerce.errors import CartPreconditionError, CommerceError
from app.commerce.notifications import Notifier
from app.commerce.schemas import Address, Cart, LineItem, Order, Product, ShippingOption
from app.commerce.storage import CART_ID_KEY, LocalStorage

logger = logging.getLogger(__name__)


class CartState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    EMPTY = "empty"
    POPULATED = "populated"
    ERROR = "error"


@dataclass(frozen=True)
class CartEntry:
    """
    A line item as the storefront sees it.

    Local identity is (product_id, size); line_item_id is what the
    remote API needs for updates and removals.
    """

    line_item_id: str
    variant_id: str | None
    product_id: str
    title: str
    quantity: int
    unit_price: int
    size: str | None = None
    thumbnail: str | None = None

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.product_id, self.size)

    @classmethod
    def from_line_item(cls, item: LineItem) -> "CartEntry":
        variant = item.variant
        variant_id = item.variant_id or (variant.id if variant else None)
        product_id = (
            item.product_id
            or (variant.product_id if variant else None)
            or variant_id
            or item.id
        )
        size = variant_size(variant) if variant else None
        return cls(
            line_item_id=item.id,
            variant_id=variant_id,
            product_id=product_id,
            title=item.title,
            quantity=item.quantity,
            unit_price=item.unit_price,
            size=size,
            thumbnail=item.thumbnail,
        )


Listener = Callable[["CartSession"], None]


class CartSession:
    """
    Cart reconciliation against the commerce backend.

    Args:
        client: remote commerce client.
        storage: local storage holding the cart id.
        notifier: where remote errors and confirmations are reported.
        region_id: callable returning the active region id, used when a
            new cart has to be created.
    """

    def __init__(
        self,
        client: CommerceClient,
        storage: LocalStorage,
        notifier: Notifier | None = None,
        region_id: Callable[[], str | None] | None = None,
    ):
        self.client = client
        self.storage = storage
        self.notifier = notifier or Notifier()
        self._region_id = region_id or (lambda: None)

        self.state = CartState.UNINITIALIZED
        self.cart: Cart | None = None
        self.last_error: CommerceError | None = None

        self._lock = threading.Lock()
        self._generation = 0
        self._applied_generation = 0
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(session)` after every state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _apply(self, cart: Cart | None, generation: int | None = None) -> bool:
        """
        Replace the in-memory cart.

        Returns False (and changes nothing) when `generation` is older
        than the last applied one.
        """
        with self._lock:
            if generation is None:
                self._generation += 1
                generation = self._generation
            if generation < self._applied_generation:
                logger.debug(
                    "Dropping stale cart response (generation %s < %s)",
                    generation,
                    self._applied_generation,
                )
                return False
            self._applied_generation = generation
            self.cart = cart
            self.last_error = None
            self.state = CartState.POPULATED if cart and cart.items else CartState.EMPTY
        self._emit()
        return True

    def _set_error(self, error: CommerceError) -> None:
        with self._lock:
            self.last_error = error
            self.state = CartState.ERROR
        self._emit()

    def _forget_cart(self) -> None:
        self.storage.remove(CART_ID_KEY)
        self._apply(None)

    @property
    def cart_id(self) -> str | None:
        return self.storage.get(CART_ID_KEY)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> CartState:
        """
        Load the persisted cart, if any.

        Never raises for remote failures: an unknown or expired cart id
        is cleared and the session starts empty.
        """
        with self._lock:
            self.state = CartState.LOADING
        self._emit()

        cart_id = self.cart_id
        if not cart_id:
            self._apply(None)
            return self.state

        generation = self._next_generation()
        try:
            cart = self.client.get_cart(cart_id)
        except CommerceError as e:
            logger.info("Persisted cart %s could not be loaded (%s); starting fresh", cart_id, e)
            self.storage.remove(CART_ID_KEY)
            self._apply(None, generation)
            return self.state

        self._apply(cart, generation)
        return self.state

    def refresh(self) -> Cart | None:
        """
        Re-fetch the canonical cart and replace local state.

        - no cart id: state becomes empty
        - cart gone (404): cart id cleared, state empty
        - other failures: state error, last known cart kept
        """
        cart_id = self.cart_id
        if not cart_id:
            self._apply(None)
            return None

        generation = self._next_generation()
        try:
            cart = self.client.get_cart(cart_id)
        except CommerceError as e:
            if e.is_not_found:
                logger.info("Cart %s no longer exists; clearing it", cart_id)
                self.storage.remove(CART_ID_KEY)
                self._apply(None, generation)
                return None
            logger.error("Failed to refresh cart %s: %s", cart_id, e)
            self._set_error(e)
            return self.cart

        self._apply(cart, generation)
        return self.cart

    def clear(self) -> None:
        """
        Forget the cart locally: drop the persisted id and the in-memory
        cart. Re-fetches still in flight are discarded when they return.
        """
        self._forget_cart()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _ensure_cart(self) -> str:
        cart_id = self.cart_id
        if cart_id:
            return cart_id

        try:
            cart = self.client.create_cart(self._region_id())
        except CommerceError as e:
            self._report("Failed to create cart", e)
            raise
        self.storage.set(CART_ID_KEY, cart.id)
        self._apply(cart)
        logger.info("Created cart %s", cart.id)
        return cart.id

    def _require_cart_id(self) -> str:
        cart_id = self.cart_id
        if not cart_id:
            raise CartPreconditionError("No cart exists yet")
        return cart_id

    def _report(self, action: str, error: CommerceError) -> None:
        self._set_error(error)
        self.notifier.error("Error", f"{action}: {error.message}")

    def _fail(self, action: str, error: CommerceError) -> None:
        """
        Report a failed cart call. A 404 may mean the cart itself expired
        remotely; the refresh then clears the id so the next add starts a
        new cart.
        """
        self._report(action, error)
        if error.is_not_found and self.cart_id:
            self.refresh()

    def _mutate(self, action: str, call: Callable[[], Any]) -> Any:
        """Run one remote mutation, then re-fetch the cart."""
        try:
            result = call()
        except CommerceError as e:
            self._fail(action, e)
            raise
        self.refresh()
        return result

    def add_item(
        self,
        variant_id: str,
        quantity: int = 1,
        label: str = "The item",
    ) -> Cart | None:
        """
        Add `quantity` of a variant, creating the cart first if needed.
        """
        if quantity <= 0:
            raise CartPreconditionError("Quantity to add must be positive")

        cart_id = self._ensure_cart()
        self._mutate(
            "Failed to add item to cart",
            lambda: self.client.add_line_item(cart_id, variant_id, quantity),
        )
        # A failed re-fetch leaves the state in error; no confirmation then
        if self.state is not CartState.ERROR:
            self.notifier.info("Added to cart", f"{label} has been added to your cart.")
        return self.cart

    def add_product(
        self,
        product: Product,
        size: str | None = None,
        quantity: int = 1,
    ) -> Cart | None:
        """
        Add a product by picking the variant that matches `size`.
        """
        variant = variant_for_size(product, size)
        if variant is None:
            raise CartPreconditionError(
                f"No variant of {product.title!r} matches size {size!r}"
            )
        return self.add_item(variant.id, quantity, label=product.title)

    def update_item(self, line_item_id: str, quantity: int) -> Cart | None:
        """
        Set the quantity of a line item. Zero or less removes it.
        """
        if quantity <= 0:
            return self.remove_item(line_item_id)

        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to update quantity",
            lambda: self.client.update_line_item(cart_id, line_item_id, quantity),
        )
        return self.cart

    def remove_item(self, line_item_id: str) -> Cart | None:
        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to remove item from cart",
            lambda: self.client.remove_line_item(cart_id, line_item_id),
        )
        return self.cart

    def find(self, product_id: str, size: str | None = None) -> CartEntry | None:
        for entry in self.items:
            if entry.key == (product_id, size):
                return entry
        return None

    def _entry_or_fail(self, product_id: str, size: str | None) -> CartEntry:
        entry = self.find(product_id, size)
        if entry is None:
            raise CartPreconditionError(f"Item {product_id!r} (size {size!r}) is not in the cart")
        return entry

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        size: str | None = None,
    ) -> Cart | None:
        """Quantity update addressed by (product id, size)."""
        self._require_cart_id()
        entry = self._entry_or_fail(product_id, size)
        return self.update_item(entry.line_item_id, quantity)

    def remove_product(self, product_id: str, size: str | None = None) -> Cart | None:
        self._require_cart_id()
        entry = self._entry_or_fail(product_id, size)
        return self.remove_item(entry.line_item_id)

    # ------------------------------------------------------------------
    # Discounts, region, checkout
    # ------------------------------------------------------------------

    def apply_discount(self, code: str) -> Cart | None:
        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to apply discount",
            lambda: self.client.apply_discount(cart_id, code),
        )
        return self.cart

    def remove_discount(self, code: str) -> Cart | None:
        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to remove discount",
            lambda: self.client.remove_discount(cart_id, code),
        )
        return self.cart

    def set_region(self, region_id: str) -> Cart | None:
        """Move an existing cart to another region; no-op without a cart."""
        cart_id = self.cart_id
        if not cart_id:
            return None
        self._mutate(
            "Failed to change region",
            lambda: self.client.update_cart(cart_id, {"region_id": region_id}),
        )
        return self.cart

    def set_addresses(
        self,
        shipping_address: Address,
        billing_address: Address | None = None,
        email: str | None = None,
    ) -> Cart | None:
        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to save address",
            lambda: self.client.set_addresses(cart_id, shipping_address, billing_address, email),
        )
        return self.cart

    def shipping_options(self) -> list[ShippingOption]:
        cart_id = self._require_cart_id()
        try:
            return self.client.list_shipping_options(cart_id)
        except CommerceError as e:
            self._fail("Failed to load shipping options", e)
            raise

    def select_shipping(self, option_id: str) -> Cart | None:
        cart_id = self._require_cart_id()
        self._mutate(
            "Failed to select shipping",
            lambda: self.client.add_shipping_method(cart_id, option_id),
        )
        return self.cart

    def prepare_payment(self, provider_id: str) -> Cart | None:
        """Create payment sessions and select `provider_id`."""
        cart_id = self._require_cart_id()
        try:
            self.client.create_payment_sessions(cart_id)
        except CommerceError as e:
            self._fail("Failed to start payment", e)
            raise
        self._mutate(
            "Failed to select payment provider",
            lambda: self.client.select_payment_session(cart_id, provider_id),
        )
        return self.cart

    def complete(self) -> Order:
        """
        Complete checkout. On success the cart id is cleared and the
        session is empty again.
        """
        cart_id = self._require_cart_id()
        if not self.items:
            raise CartPreconditionError("Cannot check out an empty cart")
        try:
            order = self.client.complete_cart(cart_id)
        except CommerceError as e:
            self._fail("Checkout failed", e)
            raise
        self._forget_cart()
        self.notifier.info("Order placed", f"Order #{order.display_id or order.id} confirmed.")
        return order

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[CartEntry]:
        if self.cart is None:
            return []
        return [CartEntry.from_line_item(item) for item in self.cart.items]

    @property
    def item_count(self) -> int:
        return sum(entry.quantity for entry in self.items)

    @property
    def total(self) -> int:
        """Server-computed total; 0 when there is no cart."""
        return self.cart.total if self.cart else 0

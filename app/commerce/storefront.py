# app/commerce/storefront.py
"""
Storefront container: one object holding everything a shopper session
needs (regions, cart, customer, notifications). Nothing is fetched until
`initialize()` is called.

Usage:

    from app.commerce.storefront import Storefront

    with Storefront.from_settings() as shop:
        shop.initialize()
        product = shop.client.get_product("rose-gold-diamond-ring")
        shop.cart.add_product(product, size="7")
        print(shop.format_price(shop.cart.total))
"""

import logging

from app.commerce.cart_session import CartSession
from app.commerce.client import CommerceClient
from app.commerce.customer_session import CustomerSession
from app.commerce.notifications import Notifier
from app.commerce.pricing import DEFAULT_LOCALE
from app.commerce.regions import RegionResolver
from app.commerce.schemas import Cart, Region
from app.commerce.storage import LocalStorage, storage_from_settings
from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Storefront:
    def __init__(
        self,
        client: CommerceClient,
        notifier: Notifier | None = None,
        locale: str = DEFAULT_LOCALE,
    ):
        self.client = client
        self.storage: LocalStorage = client.storage
        self.notifier = notifier or Notifier()
        self.regions = RegionResolver(client, self.storage, locale=locale)
        self.cart = CartSession(
            client,
            self.storage,
            notifier=self.notifier,
            region_id=lambda: self.regions.region_id,
        )
        self.customer = CustomerSession(
            client,
            self.storage,
            on_login=self._after_login,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        locale: str = DEFAULT_LOCALE,
    ) -> "Storefront":
        settings = settings or get_settings()
        storage = storage_from_settings(settings.STOREFRONT_STATE_FILE)
        client = CommerceClient.from_settings(storage=storage, settings=settings)
        return cls(client, locale=locale)

    def initialize(self) -> None:
        """Load regions, the persisted cart and the customer session."""
        self.regions.load()
        self.cart.initialize()
        self.customer.initialize()
        logger.info(
            "Storefront ready: region=%s cart=%s authenticated=%s",
            self.regions.region_id,
            self.cart.state.value,
            self.customer.is_authenticated,
        )

    def _after_login(self) -> None:
        # Re-fetch so the cart reflects the customer association
        if self.cart.cart_id:
            self.cart.refresh()

    def set_region(self, region_id: str) -> Region | None:
        """
        Switch the active region and move an existing cart along with it.
        """
        region = self.regions.set_region(region_id)
        if region is not None:
            self.cart.set_region(region.id)
        return region

    def format_price(self, amount: int) -> str:
        return self.regions.format_price(amount)

    @property
    def current_cart(self) -> Cart | None:
        return self.cart.cart

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "Storefront":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

# app/commerce/regions.py
import logging

from app.commerce.client import CommerceClient
from app.commerce.errors import CommerceError
from app.commerce.pricing import DEFAULT_CURRENCY, DEFAULT_LOCALE, format_price
from app.commerce.schemas import Region
from app.commerce.storage import REGION_ID_KEY, LocalStorage

logger = logging.getLogger(__name__)


def resolve_region(regions: list[Region], preferred_id: str | None) -> Region | None:
    """
    Active region: the preferred one if it is among `regions`,
    else the first region, else None.
    """
    if preferred_id:
        for region in regions:
            if region.id == preferred_id:
                return region
    return regions[0] if regions else None


class RegionResolver:
    """
    Holds the fetched regions and the active one.

    The explicit preference lives in local storage under REGION_ID_KEY.
    """

    def __init__(self, client: CommerceClient, storage: LocalStorage, locale: str = DEFAULT_LOCALE):
        self.client = client
        self.storage = storage
        self.locale = locale
        self.regions: list[Region] = []
        self.region: Region | None = None

    def load(self) -> Region | None:
        """
        Fetch regions and resolve the active one.

        A failed fetch is logged and leaves no active region; prices then
        format in the default currency.
        """
        try:
            self.regions = self.client.list_regions()
        except CommerceError as e:
            logger.error("Failed to fetch regions: %s", e)
            self.regions = []

        self.region = resolve_region(self.regions, self.storage.get(REGION_ID_KEY))
        return self.region

    def set_region(self, region_id: str) -> Region | None:
        """
        Make `region_id` the active region and remember the preference.

        Unknown ids are ignored (returns None, keeps the current region).
        """
        for region in self.regions:
            if region.id == region_id:
                self.region = region
                self.storage.set(REGION_ID_KEY, region_id)
                return region
        logger.warning("Ignoring unknown region %s", region_id)
        return None

    @property
    def region_id(self) -> str | None:
        return self.region.id if self.region else None

    @property
    def currency_code(self) -> str:
        return self.region.currency_code if self.region else DEFAULT_CURRENCY

    def format_price(self, amount: int) -> str:
        return format_price(amount, self.currency_code, self.locale)

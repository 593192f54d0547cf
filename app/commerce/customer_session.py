# app/commerce/customer_session.py
import logging
import time
from typing import Any, Callable

from jose import JWTError, jwt

from app.commerce.client import CommerceClient
from app.commerce.errors import CommerceError
from app.commerce.schemas import Address, Customer, OrderPage
from app.commerce.storage import TOKEN_KEY, LocalStorage

logger = logging.getLogger(__name__)


def token_claims(token: str) -> dict[str, Any] | None:
    """
    Read the claims of a JWT bearer token without verifying it.

    The signature is the backend's business; the storefront only peeks
    at `exp` / `actor_id`. Returns None for opaque (non-JWT) tokens.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def token_expired(token: str, now: float | None = None) -> bool:
    """True only for a JWT whose `exp` claim is in the past."""
    claims = token_claims(token)
    if not claims or "exp" not in claims:
        return False
    try:
        exp = float(claims["exp"])
    except (TypeError, ValueError):
        return False
    return exp <= (now if now is not None else time.time())


class CustomerSession:
    """
    Customer authentication state.

    The bearer token in local storage is the only persisted piece:
    present means authenticated, absent means guest. `customer` holds the
    last fetched profile.

    Args:
        client: remote commerce client (reads the token from `storage`).
        storage: local storage holding the token.
        on_login: called after a successful login, e.g. to refresh the
            cart so it gets associated with the customer.
    """

    def __init__(
        self,
        client: CommerceClient,
        storage: LocalStorage,
        on_login: Callable[[], Any] | None = None,
    ):
        self.client = client
        self.storage = storage
        self.on_login = on_login
        self.customer: Customer | None = None
        self.loading = False

    @property
    def token(self) -> str | None:
        return self.storage.get(TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.customer is not None

    def initialize(self) -> Customer | None:
        """
        Restore the session from a persisted token.

        Expired JWTs are dropped without a request; any failure to fetch
        the customer clears the token. Never raises for remote errors.
        """
        self.loading = True
        try:
            token = self.token
            if not token:
                self.customer = None
                return None

            if token_expired(token):
                logger.info("Stored customer token has expired; dropping it")
                self.storage.remove(TOKEN_KEY)
                self.customer = None
                return None

            try:
                self.customer = self.client.get_customer()
            except CommerceError as e:
                logger.info("Customer session could not be restored (%s)", e)
                self.storage.remove(TOKEN_KEY)
                self.customer = None
            return self.customer
        finally:
            self.loading = False

    def refresh(self) -> Customer | None:
        try:
            self.customer = self.client.get_customer()
        except CommerceError as e:
            logger.info("Failed to refresh customer: %s", e)
            self.customer = None
        return self.customer

    def login(self, email: str, password: str) -> Customer:
        """
        Log in, persist the token and load the customer profile.

        Raises CommerceError if the credentials are rejected or the
        profile can't be loaded; no token is kept in either case.
        """
        self.client.login(email, password)
        try:
            customer = self.client.get_customer()
        except CommerceError:
            self.storage.remove(TOKEN_KEY)
            self.customer = None
            raise
        self.customer = customer
        logger.info("Customer %s logged in", customer.id)
        if self.on_login is not None:
            self.on_login()
        return customer

    def logout(self) -> None:
        """
        Log out. The token is removed and the customer reset even when the
        remote logout call fails.
        """
        try:
            self.client.logout()
        except CommerceError as e:
            logger.warning("Remote logout failed (%s); clearing local session anyway", e)
        self.storage.remove(TOKEN_KEY)
        self.customer = None

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
    ) -> Customer:
        """Create the account, then log in with the same credentials."""
        self.client.register(email, password, first_name, last_name, phone)
        return self.login(email, password)

    def update_profile(self, **fields: Any) -> Customer:
        data = {k: v for k, v in fields.items() if v is not None}
        self.customer = self.client.update_customer(data)
        return self.customer

    def add_address(self, address: Address) -> Customer:
        self.customer = self.client.add_address(address)
        return self.customer

    def update_address(self, address_id: str, **fields: Any) -> Customer:
        data = {k: v for k, v in fields.items() if v is not None}
        self.customer = self.client.update_address(address_id, data)
        return self.customer

    def delete_address(self, address_id: str) -> Customer:
        self.customer = self.client.delete_address(address_id)
        return self.customer

    def orders(self, limit: int | None = None, offset: int | None = None) -> OrderPage:
        return self.client.list_orders(limit=limit, offset=offset)

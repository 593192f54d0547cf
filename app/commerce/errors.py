# app/commerce/errors.py


class StorefrontError(Exception):
    """Base class for storefront client errors."""


class CommerceError(StorefrontError):
    """
    Error returned by (or while talking to) the commerce backend.

    Attributes:
        status: HTTP status code; 0 when no response was received
            (connection refused, timeout, ...).
        code: optional provider error code from the response body.
    """

    def __init__(self, message: str, status: int, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status in (401, 403)

    def __repr__(self) -> str:
        return f"CommerceError(status={self.status}, code={self.code!r}, message={self.message!r})"


class CartPreconditionError(StorefrontError):
    """
    A cart operation was attempted in a local state that does not allow it,
    e.g. updating a line item when no cart exists yet.
    """

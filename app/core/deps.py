# app/core/deps.py
"""
Shared FastAPI dependencies for the demo API.

Limiters and the payment simulator are module-level singletons so their
state survives across requests; tests override them through
`app.dependency_overrides` or call `.reset()`.
"""

from app.core.config import get_settings
from app.core.rate_limit import RateLimiter
from app.services.payment_service import PaymentSimulator

settings = get_settings()

api_limiter = RateLimiter(
    settings.RATE_LIMIT_API_REQUESTS,
    settings.RATE_LIMIT_API_WINDOW_SECONDS,
)

checkout_limiter = RateLimiter(
    settings.RATE_LIMIT_CHECKOUT_REQUESTS,
    settings.RATE_LIMIT_CHECKOUT_WINDOW_SECONDS,
    message="Too many order attempts, please try again in a few minutes.",
)

_payment_simulator = PaymentSimulator(
    delay_seconds=settings.PAYMENT_DELAY_SECONDS,
    failure_rate=settings.PAYMENT_FAILURE_RATE,
)


def get_payment_simulator() -> PaymentSimulator:
    return _payment_simulator

import logging
import random
import time
from typing import Callable

from fastapi import HTTPException, status

from app.schemas.payment import PaymentSimulateRequest, PaymentSimulateResult

logger = logging.getLogger(__name__)


class PaymentSimulator:
    """
    Fake payment processor for the demo checkout.

    Waits `delay_seconds`, then fails with probability `failure_rate`.
    `rng` and `sleep` are injectable so tests can pin the outcome.
    """

    def __init__(
        self,
        delay_seconds: float = 1.5,
        failure_rate: float = 0.05,
        rng: Callable[[], float] = random.random,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        self.delay_seconds = delay_seconds
        self.failure_rate = failure_rate
        self._rng = rng
        self._sleep = sleep

    def charge(self, payload: PaymentSimulateRequest) -> PaymentSimulateResult:
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)

        if self._rng() < self.failure_rate:
            logger.info("Simulated payment failed for order %s", payload.order_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment failed. Please try again.",
            )

        result = PaymentSimulateResult(
            transaction_id=f"txn_{int(time.time() * 1000)}",
            amount=payload.amount,
        )
        logger.info(
            "Simulated payment %s for order %s amount=%s",
            result.transaction_id,
            payload.order_id,
            payload.amount,
        )
        return result

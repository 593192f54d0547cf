from fastapi import APIRouter, Depends

from app.core.deps import api_limiter, get_payment_simulator
from app.schemas.payment import PaymentSimulateRequest, PaymentSimulateResult
from app.services.payment_service import PaymentSimulator

router = APIRouter(
    prefix="/payment",
    tags=["Payment"],
    dependencies=[Depends(api_limiter)],
)


@router.post("/simulate", response_model=PaymentSimulateResult)
def simulate_payment(
    payload: PaymentSimulateRequest,
    simulator: PaymentSimulator = Depends(get_payment_simulator),
):
    """
    Simulated payment for the demo checkout.

    - Waits PAYMENT_DELAY_SECONDS.
    - Fails with 400 at PAYMENT_FAILURE_RATE (5% by default).
    """
    return simulator.charge(payload)

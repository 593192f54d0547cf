from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class PaymentSimulateRequest(SQLModel):
    """
    Payload for the simulated payment endpoint.
    """

    model_config = ConfigDict(extra="ignore")

    amount: int = Field(ge=0, description="Amount in minor units")
    order_id: str | None = None


class PaymentSimulateResult(SQLModel):
    """
    Successful simulated payment.
    """

    success: bool = True
    transaction_id: str
    amount: int
    status: str = "paid"

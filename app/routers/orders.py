from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.deps import api_limiter, checkout_limiter
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from app.services.order_service import OrderService

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(api_limiter)],
)

order_repo = OrderRepository()
service = OrderService(order_repo)


@router.get("", response_model=list[OrderRead])
def list_orders(session: Session = Depends(get_session)):
    """
    List all orders, newest first.
    """
    return service.list_orders(session)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
):
    """
    Get a single order by id.
    """
    return service.get_order(session, order_id)


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(checkout_limiter)],
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
):
    """
    Create an order from a storefront checkout.

    Rate limited per client (checkout limiter).
    """
    return service.create_order(session, payload)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status.

    - 400 if status is missing, not a string or blank.
    - 404 if the order does not exist.
    """
    return service.update_status(session, order_id, payload)

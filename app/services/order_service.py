import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.order import Order
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderCreate, OrderStatusUpdate

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for demo orders.

    Responsibilities:
      - create orders from a storefront checkout payload
      - check the submitted total against the submitted items
      - update order status
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    def list_orders(self, session: Session) -> list[Order]:
        return self.order_repo.list_all(session)

    def get_order(self, session: Session, order_id: str) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def create_order(self, session: Session, payload: OrderCreate) -> Order:
        """
        Persist a new order with status 'pending'.

        Raises 400 if the submitted total does not equal
        sum(price * quantity) over the items.
        """
        computed = sum(item.price * item.quantity for item in payload.items)
        if computed != payload.total:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Order total mismatch: submitted {payload.total}, "
                    f"items add up to {computed}"
                ),
            )

        order = Order(
            customer_name=payload.customer_name,
            customer_email=str(payload.customer_email),
            customer_phone=payload.customer_phone,
            shipping_address=payload.shipping_address,
            items=[item.model_dump() for item in payload.items],
            total=payload.total,
            payment_method=payload.payment_method,
            status="pending",
        )
        order = self.order_repo.create(session, order)
        logger.info("Created order %s total=%s", order.id, order.total)
        return order

    def update_status(
        self,
        session: Session,
        order_id: str,
        payload: OrderStatusUpdate,
    ) -> Order:
        """
        Set the order status.

        Any non-empty string is stored (trimmed); statuses are not gated by
        a workflow. A non-string or blank status raises 400, an unknown
        order 404.
        """
        new = payload.status
        if not isinstance(new, str) or not new.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid status",
            )
        new = new.strip()

        order = self.get_order(session, order_id)
        current = order.status
        if current == new:
            return order

        order.status = new
        order = self.order_repo.update(session, order)
        logger.info("Order %s status %s -> %s", order.id, current, new)
        return order

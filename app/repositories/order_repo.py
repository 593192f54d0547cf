from sqlmodel import Session, select

from app.models.order import Order


class OrderRepository:
    """
    Data access layer for demo orders.
    """

    def list_all(self, session: Session) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc())
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: str) -> Order | None:
        return session.get(Order, order_id)

    def create(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    def update(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

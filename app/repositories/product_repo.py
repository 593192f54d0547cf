from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for the demo catalog.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: str) -> Product | None:
        return session.get(Product, product_id)

    def list_all(self, session: Session) -> list[Product]:
        stmt = select(Product).order_by(Product.created_at)
        return session.exec(stmt).all()

    def count(self, session: Session) -> int:
        return len(session.exec(select(Product.id)).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def create_many(self, session: Session, products: list[Product]) -> list[Product]:
        session.add_all(products)
        session.commit()
        for product in products:
            session.refresh(product)
        return products

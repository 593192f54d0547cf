from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.deps import api_limiter
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductRead
from app.services.product_service import ProductService

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(api_limiter)],
)

repo = ProductRepository()
service = ProductService(repo)


@router.get("", response_model=list[ProductRead])
def list_products(session: Session = Depends(get_session)):
    """
    List all products in the demo catalog.
    """
    return service.list_products(session)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: str,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.

    - 404 if the product does not exist.
    """
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product.
    """
    return service.create_product(session, payload)

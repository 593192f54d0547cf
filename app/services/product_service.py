import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate

logger = logging.getLogger(__name__)


_ASSETS = "/assets/generated_images"

# Demo catalog seeded on startup. Prices are minor units (IDR cents).
DEMO_PRODUCTS: list[dict] = [
    {
        "name": "Rose Gold Diamond Ring",
        "description": (
            "Exquisite handcrafted rose gold ring featuring a brilliant-cut "
            "diamond. Perfect for engagements or special occasions."
        ),
        "price": 2500000,
        "category": "rings",
        "image": f"{_ASSETS}/Rose_gold_diamond_ring_406b3b84.png",
        "material": "14K Rose Gold, Diamond",
        "sizes": ["5", "6", "7", "8", "9"],
    },
    {
        "name": "Gold Pendant Necklace",
        "description": (
            "Delicate gold chain necklace with an elegant pendant. "
            "A timeless piece that complements any outfit."
        ),
        "price": 1800000,
        "category": "necklaces",
        "image": f"{_ASSETS}/Gold_pendant_necklace_84aa4494.png",
        "material": "18K Yellow Gold",
    },
    {
        "name": "Silver Charm Bracelet",
        "description": (
            "Elegant sterling silver bracelet with customizable charm "
            "options. A perfect gift for loved ones."
        ),
        "price": 950000,
        "category": "bracelets",
        "image": f"{_ASSETS}/Silver_charm_bracelet_db9c5a93.png",
        "material": "Sterling Silver",
        "sizes": ["S", "M", "L"],
    },
    {
        "name": "Pearl Stud Earrings",
        "description": (
            "Classic pearl earrings set in premium metal. "
            "Timeless elegance for everyday wear."
        ),
        "price": 750000,
        "category": "earrings",
        "image": f"{_ASSETS}/Pearl_stud_earrings_00219806.png",
        "material": "Freshwater Pearl, Sterling Silver",
    },
    {
        "name": "Rose Gold Stackable Rings Set",
        "description": (
            "Set of three delicate stackable rings in rose gold. "
            "Mix and match for a personalized look."
        ),
        "price": 1650000,
        "category": "rings",
        "image": f"{_ASSETS}/Rose_gold_stackable_rings_c4608c25.png",
        "material": "14K Rose Gold",
        "sizes": ["5", "6", "7", "8", "9"],
        "is_pre_order": True,
        "in_stock": False,
    },
    {
        "name": "Gold Hoop Earrings",
        "description": (
            "Modern hoop earrings in polished gold. "
            "Versatile and sophisticated for any occasion."
        ),
        "price": 1200000,
        "category": "earrings",
        "image": f"{_ASSETS}/Gold_hoop_earrings_86358172.png",
        "material": "18K Yellow Gold",
    },
    {
        "name": "Silver Infinity Necklace",
        "description": (
            "Symbolic infinity pendant on a delicate silver chain. "
            "Represents eternal love and friendship."
        ),
        "price": 850000,
        "category": "necklaces",
        "image": f"{_ASSETS}/Silver_infinity_necklace_eb3fd355.png",
        "material": "Sterling Silver",
    },
    {
        "name": "Diamond Tennis Bracelet",
        "description": (
            "Luxurious tennis bracelet featuring brilliant diamonds. "
            "A statement piece for special events."
        ),
        "price": 3500000,
        "category": "bracelets",
        "image": f"{_ASSETS}/Silver_charm_bracelet_db9c5a93.png",
        "material": "18K White Gold, Diamonds",
        "sizes": ["S", "M", "L"],
        "is_pre_order": True,
        "in_stock": False,
    },
]


class ProductService:
    """
    Business logic for the demo catalog.

    Responsibilities:
      - list / get / create products
      - seed the catalog with sample jewelry on first start
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(self, session: Session) -> list[Product]:
        return self.repo.list_all(session)

    def get_product(self, session: Session, product_id: str) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> Product:
        """
        Create a new product.

        If no main image is given, the first gallery image is used.
        """
        image_url = payload.image_url
        if image_url is None and payload.images:
            image_url = payload.images[0]

        product = Product(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            category=payload.category,
            image_url=image_url,
            images=list(payload.images),
            material=payload.material,
            sizes=payload.sizes,
            is_pre_order=payload.is_pre_order,
            in_stock=payload.in_stock,
        )
        product = self.repo.create(session, product)
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def seed_demo_catalog(self, session: Session) -> int:
        """
        Insert DEMO_PRODUCTS if the catalog is empty.

        Returns:
            Number of products inserted (0 if the catalog already had rows).
        """
        if self.repo.count(session) > 0:
            return 0

        products = [
            Product(
                name=raw["name"],
                description=raw["description"],
                price=raw["price"],
                category=raw["category"],
                image_url=raw["image"],
                images=[raw["image"], raw["image"]],
                material=raw["material"],
                sizes=raw.get("sizes"),
                is_pre_order=raw.get("is_pre_order", False),
                in_stock=raw.get("in_stock", True),
            )
            for raw in DEMO_PRODUCTS
        ]
        self.repo.create_many(session, products)
        return len(products)

# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from sqlmodel import Session

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401

# Routers
from app.routers.products import router as products_router, service as product_service
from app.routers.orders import router as orders_router
from app.routers.payments import router as payments_router

settings = get_settings()

configure_logging()
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create tables.
      - Seed the demo catalog if it is empty.
    """
    logger.info("Startup: preparing demo catalog storage...")
    try:
        create_db_and_tables()
        if settings.SEED_DEMO_CATALOG:
            with Session(engine) as session:
                inserted = product_service.seed_demo_catalog(session)
            logger.info("Startup: seeded %d demo products.", inserted)
    except Exception as e:
        logger.error(f"Startup: storage initialization FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API prefix, e.g. /api
app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(payments_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "jewelry-commerce-api"}

# app/database.py
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Demo catalog storage
#
# The default DATABASE_URL ("sqlite://") is a private in-memory
# database. StaticPool keeps a single connection alive so every
# session sees the same data, and check_same_thread=False lets
# FastAPI's threadpool share it.
#
# Any other URL (e.g. a file-backed SQLite or Postgres) gets a
# regular pool with pre-ping.
# ---------------------------------------------------------


def build_engine(db_url: str):
    """Create the SQLModel engine for the given URL."""
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    return create_engine(db_url, echo=False, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session

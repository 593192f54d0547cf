from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Demo catalog API:
      - DATABASE_URL (defaults to an in-memory SQLite database)
      - PAYMENT_DELAY_SECONDS / PAYMENT_FAILURE_RATE for /payment/simulate

    Commerce backend (Medusa store API):
      - MEDUSA_BACKEND_URL
      - MEDUSA_PUBLISHABLE_KEY (optional, sent as x-publishable-api-key)

    Storefront session:
      - STOREFRONT_STATE_FILE (optional JSON file used as local storage;
        in-memory storage is used when unset)
    """

    PROJECT_NAME: str = "Jewelry Commerce API"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite://"
    SEED_DEMO_CATALOG: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
        "http://localhost:5173",
    ]

    # Medusa store API
    MEDUSA_BACKEND_URL: str = "http://localhost:9000"
    MEDUSA_PUBLISHABLE_KEY: str | None = None
    MEDUSA_TIMEOUT: float = 10.0

    STOREFRONT_STATE_FILE: str | None = None

    # Simulated payments
    PAYMENT_DELAY_SECONDS: float = 1.5
    PAYMENT_FAILURE_RATE: float = 0.05

    # Rate limits (per client IP)
    RATE_LIMIT_API_REQUESTS: int = 100
    RATE_LIMIT_API_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_CHECKOUT_REQUESTS: int = 3
    RATE_LIMIT_CHECKOUT_WINDOW_SECONDS: int = 5 * 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

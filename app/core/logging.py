# app/core/logging.py
"""
Logging setup shared by the API and the storefront client.

Usage:
    from app.core.logging import configure_logging
    configure_logging()

Modules themselves only do `logger = logging.getLogger(__name__)`.
"""

import logging

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """
    Configure the root logger once.

    Level comes from the explicit argument, else LOG_LEVEL in settings.
    """
    level_name = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

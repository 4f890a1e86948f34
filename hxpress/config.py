"""
hxpress configuration — all environment variables in one place.

Read from environment at import time. Rendering reads these through the
`settings` singleton so a process can override them before first use.
"""

from __future__ import annotations

import logging
import os


class Settings:
    """Library settings from environment variables."""

    # Prefix of the request framework's attribute namespace (hx-get, hx-target, ...)
    ATTRIBUTE_PREFIX: str = os.environ.get("HXPRESS_ATTRIBUTE_PREFIX", "hx-")

    # Extra characters left unescaped when percent-encoding request arguments
    URLENCODE_SAFE: str = os.environ.get("HXPRESS_URLENCODE_SAFE", "")

    # Logging
    LOG_LEVEL: str = os.environ.get("HXPRESS_LOG_LEVEL", "WARNING")
    LOG_FORMAT: str = os.environ.get(
        "HXPRESS_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Singleton instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the hxpress logger (applications opt in)."""
    logger = logging.getLogger("hxpress")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        logger.addHandler(handler)

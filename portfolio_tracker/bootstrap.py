"""Process start-up wiring for logging and telemetry."""

from __future__ import annotations

import logging

from .config import AppSettings, get_settings
from .core.logging import setup_logging
from .core.telemetry import setup_telemetry

logger = logging.getLogger(__name__)


def configure(settings: AppSettings | None = None) -> AppSettings:
    """Apply ``settings`` to logging and telemetry and return them.

    Call once when the embedding process starts, before the first refresh.
    """

    settings = settings or get_settings()
    setup_logging(settings.debug)
    setup_telemetry(settings)
    logger.info("Starting %s with settings %s", settings.app_name, settings.dict_for_logging())
    return settings


__all__ = ["configure"]

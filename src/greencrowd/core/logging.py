"""
Logging configuration.

We use a YAML logging config (`src/greencrowd/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `GREENCROWD_LOG_LEVEL`).
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping

from greencrowd.config.settings import get_logging_config, get_settings

EVENT_LOGGER_NAME = "greencrowd.events"


def configure_logging() -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = get_settings()
    config = dict(get_logging_config())

    level = settings.app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)


def log_event(event_type: str, description: str, metadata: Mapping[str, Any] | None = None) -> bool:
    """Emit a client-reported event on the dedicated events logger.

    Returns False (and only logs at debug level) when event logging is disabled.
    """
    settings = get_settings()
    logger = logging.getLogger(EVENT_LOGGER_NAME)
    meta = dict(metadata or {})
    cap = settings.events.max_metadata_keys
    if len(meta) > cap:
        meta = dict(list(meta.items())[:cap])

    if not settings.events.enabled:
        logger.debug("[logging disabled] %s - %s", event_type, description)
        return False

    logger.info("%s - %s", event_type, description, extra={"event_type": event_type, "event_metadata": meta})
    return True

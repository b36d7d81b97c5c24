"""
Structlog configuration for the viewer service.

Events are dotted names (``export.capture.skipped``). Every event carries the
service name, and events emitted while a viewer connection is open also carry
its ``deck_id`` and ``connection_id``.
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

import structlog

from slideplay.infra.config.settings import Settings, get_settings

VIEWER_CONTEXT_KEYS = ("deck_id", "connection_id")

# Capture results and exported files travel as data URIs; never log them whole
PAYLOAD_PREVIEW_CHARS = 48

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "asyncio": logging.WARNING,
    "PIL": logging.INFO,
}


def truncate_payloads(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and value.startswith("data:") and len(value) > PAYLOAD_PREVIEW_CHARS:
            event_dict[key] = f"{value[:PAYLOAD_PREVIEW_CHARS]}...({len(value)} chars)"
    return event_dict


def _service_stamper(service: str, environment: str):
    def stamp(
        logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("env", environment)
        return event_dict

    return stamp


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure structlog and the stdlib loggers it writes through.

    Args:
        log_level: Level name such as "DEBUG". Defaults to LOG_LEVEL.
        log_format: "json" or "console". Defaults to LOG_FORMAT.
        settings: Settings to read defaults and the service name from.
    """
    settings = settings or get_settings()
    level_name = (log_level or settings.log_level or "INFO").upper()
    fmt = (log_format or settings.log_format or "json").lower()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format="%(message)s")
    for name, floor in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, floor))

    renderer = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=settings.debug)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            _service_stamper(settings.app_name, settings.environment),
            truncate_payloads,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:  # type: ignore[name-defined]
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def bind_viewer_context(deck_id: str, connection_id: str) -> None:
    """Tag every event of the current viewer connection with its deck and id."""
    structlog.contextvars.bind_contextvars(deck_id=deck_id, connection_id=connection_id)


def clear_viewer_context() -> None:
    structlog.contextvars.unbind_contextvars(*VIEWER_CONTEXT_KEYS)

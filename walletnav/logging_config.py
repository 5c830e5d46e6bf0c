"""
Logging for walletnav.

Every module logs through ``logging.getLogger(__name__)``; ``setup_logging``
routes those records through structlog so each line carries the store, the
wallet and the id of the mounted navigation view it came from.
"""

import logging
import sys
from typing import Any, List, MutableMapping, Optional

import structlog

from .config import settings


NAV_SESSION_KEY = "nav_session"
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def add_wallet_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Stamp every event with the store and wallet it belongs to."""
    event_dict.setdefault("store", settings.store_name)
    event_dict.setdefault("wallet", settings.wallet_name)
    return event_dict


def _processors() -> List[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_wallet_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(level: int, log_format: str) -> structlog.types.Processor:
    if log_format == "console" or (log_format == "auto" and level <= logging.DEBUG):
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and attach it to the root stdlib logger.

    Args:
        log_level: Override ``settings.log_level``
        log_format: ``json``, ``console`` or ``auto`` (console at DEBUG);
            defaults to ``settings.log_format``
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    processors = _processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(level, log_format or settings.log_format),
        ],
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_session_context(session_id: str) -> None:
    """Tag log lines emitted from this context with the mounted view's id."""
    structlog.contextvars.bind_contextvars(**{NAV_SESSION_KEY: session_id})


def clear_session_context() -> None:
    structlog.contextvars.unbind_contextvars(NAV_SESSION_KEY)

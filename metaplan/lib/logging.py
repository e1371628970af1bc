"""
Structured logging for Metaplan.

stdlib ``logging.getLogger(__name__)`` and ``structlog.get_logger(__name__)``
both end up in one root handler rendered by structlog: console lines when
METAPLAN_DEV_MODE=1, one JSON object per line otherwise.

The active session's identifier is bound as a context variable on login,
so every record emitted while that session is active carries ``user_id``.

Usage:
    from metaplan.lib.logging import setup_logging

    setup_logging()  # once, before the app is created
"""

import logging
import os
import sys

import structlog

QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "urllib3", "sqlalchemy.engine")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
    ]


def setup_logging(dev_mode: bool | None = None) -> None:
    """
    Route stdlib and structlog records through one structlog formatter.

    Args:
        dev_mode: True for console output, False for JSON. None reads
            METAPLAN_DEV_MODE.
    """
    if dev_mode is None:
        dev_mode = os.environ.get("METAPLAN_DEV_MODE") == "1"
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # ConsoleRenderer prints tracebacks itself; JSON needs them flattened
    final: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta
    ]
    if dev_mode:
        final.append(structlog.dev.ConsoleRenderer())
    else:
        final += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(foreign_pre_chain=pre_chain, processors=final)
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # Per-request lines from the store and AI clients
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_user(user_id: str) -> None:
    """Attach ``user_id`` to every log record until unbind_user()."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def unbind_user() -> None:
    structlog.contextvars.unbind_contextvars("user_id")

"""
Structured logging for Tandem.

stdlib loggers (``logging.getLogger(__name__)``) are rendered through
structlog's ProcessorFormatter: a console renderer in dev mode, JSON lines
otherwise. Wizards bind their identity with ``wizard_log_context`` so every
line emitted while handling an event carries the wizard kind, user id and
week id.

Usage:
    from tandem.lib.logging import setup_logging

    setup_logging()  # once, at process startup
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager

import structlog

from tandem.config.settings import Settings, get_settings

# Loggers that are chatty at INFO and say nothing about the wizards.
QUIET_LOGGERS = ("sqlalchemy.engine", "redis", "aiosqlite", "asyncio")


def _renderer(dev_mode: bool) -> structlog.types.Processor:
    if dev_mode:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Settings | None = None) -> None:
    """Route stdlib logging through structlog; level and renderer come from settings."""
    settings = settings or get_settings()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.dev_mode),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def wizard_log_context(
    wizard: str, user_id: str | None, week_id: str | None,
) -> AbstractContextManager[None]:
    """Bind wizard identity to every log line emitted inside the ``with`` block."""
    return structlog.contextvars.bound_contextvars(
        wizard=wizard, user_id=user_id, week_id=week_id,
    )


__all__ = ["QUIET_LOGGERS", "setup_logging", "wizard_log_context"]

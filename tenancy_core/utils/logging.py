# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging for tenancy_core.

Service-layer code logs through structlog so every provisioning event carries
the tenant it concerns. Infrastructure modules keep plain ``logging`` loggers;
both end up on stdout with the same level.

Example:
    >>> setup_logging(get_settings())
    >>> logger = get_logger(__name__)
    >>> with tenant_context("alice"):
    ...     logger.info("Schema created")
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from tenancy_core.core.config.settings import Settings

PACKAGE_LOGGER = "tenancy_core"

# Driver and migration chatter is only interesting when it goes wrong
QUIET_LOGGERS = ("sqlalchemy", "alembic", "asyncio", "asyncpg")


def _processors(json_output: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=True))
    return chain


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and standard logging from settings.

    Development or debug runs get colored console lines, anything else gets
    one JSON object per line.

    Args:
        settings: Application settings (log_level, debug, environment).
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=_processors(json_output=not (settings.is_development or settings.debug)),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger named after the calling module."""
    return structlog.get_logger(name)


@contextmanager
def tenant_context(username: str | None, **extra: object) -> Iterator[None]:
    """Attach the tenant username (and any extra fields) to log events.

    The binding is undone on exit, including when the block raises.
    """
    with structlog.contextvars.bound_contextvars(username=username, **extra):
        yield

"""Structured logging configuration."""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog

from lens.settings import AppSettings, get_settings


SERVICE_NAME = "lens"


def _resolve_level(level: int | str) -> int:
    """Map a level name such as ``"debug"`` to its number; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.strip().upper(), logging.INFO)


def _add_service(
    _logger: object, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(
    settings: AppSettings | None = None,
    *,
    level: int | str | None = None,
    output: TextIO = sys.stderr,
    json_format: bool | None = None,
) -> None:
    """Configure structured logging for the ranking engine.

    Level and renderer come from ``LOG_LEVEL`` and ``LOG_FORMAT`` unless
    given explicitly. Every line carries ``service`` plus whatever batch
    context is bound at the time.

    Args:
        settings: Application settings; loaded from the environment when None.
        level: Logging level, numeric or a name; overrides ``LOG_LEVEL``.
        output: Output stream (default: stderr).
        json_format: JSON lines when True, colored console output when
            False; overrides ``LOG_FORMAT``.
    """
    if level is None or json_format is None:
        settings = settings or get_settings()
        if level is None:
            level = settings.log_level
        if json_format is None:
            json_format = settings.log_format == "json"
    numeric_level = _resolve_level(level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_service,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_format
        else structlog.dev.ConsoleRenderer(colors=True),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx and asyncio log through the standard library
    logging.basicConfig(format="%(message)s", stream=output, level=numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def batch_log_context(article_count: int, batch_id: str | None = None) -> Iterator[str]:
    """Tag every log line emitted inside the block with a batch id.

    Tasks created inside the block inherit the tags, so concurrent
    scoring calls are attributed to their batch.

    Args:
        article_count: Number of articles in the batch.
        batch_id: Identifier to use; a random hex id when None.

    Yields:
        The batch id.
    """
    batch_id = batch_id or uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(batch_id=batch_id, batch_size=article_count):
        yield batch_id

"""Structured logging for candle sanitizing, built on structlog.

Level and rendering come from :class:`AppSettings` (LOG_LEVEL, LOG_FORMAT).
Events from a sanitizer carry the stream they belong to: the registry wraps
each batch in :func:`stream_context`, which binds ``symbol`` and ``stream``
into structlog contextvars, and ``merge_contextvars`` folds them into every
event emitted while the batch is processed.
"""

import logging
from contextlib import AbstractContextManager

import structlog

from ohlcv_sanitizer.config import AppSettings


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(settings: AppSettings | None = None) -> None:
    """Route structlog through stdlib logging using the app's log settings.

    Args:
        settings: Application settings; loaded from the environment when omitted.
    """
    settings = settings or AppSettings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))


def stream_context(symbol: str, timeframe: object) -> AbstractContextManager:
    """Bind a candle stream's identity to every event logged inside the block."""
    return structlog.contextvars.bound_contextvars(symbol=symbol, stream=f"{symbol}@{timeframe}")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)

"""Structured logging for the forecast engine, built on structlog.

Events go through stdlib logging so that library loggers (ccxt, uvicorn)
share the same handler. Per-request context such as the symbol being
forecast is carried in structlog contextvars, which are task-local, so
concurrent forecasts never see each other's fields.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

LOG_FORMATS = ("console", "json")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Install a single root handler rendering structlog events.

    Args:
        log_level: stdlib level name; unknown names fall back to INFO.
        log_format: "console" (human-readable) or "json".

    Raises:
        ValueError: ``log_format`` is not one of LOG_FORMATS.
    """
    log_format = log_format.lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format {log_format!r}, expected one of {LOG_FORMATS}")

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@contextmanager
def forecast_context(symbol: str) -> Iterator[None]:
    """Tag every event logged inside the block with ``symbol``."""
    with structlog.contextvars.bound_contextvars(symbol=symbol):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)

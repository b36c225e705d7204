"""
Logging setup for bucketfs.

structlog on top of stdlib logging: JSON lines when deployed, coloured
console output for local work. Every module obtains its logger through
get_logger(__name__).
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "bucketfs"

# Transport libraries that log every request at DEBUG
_NOISY_LOGGERS = ("botocore", "aiobotocore", "aioboto3", "urllib3", "asyncio")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def utc_timestamper(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add a millisecond-precision ISO8601 UTC timestamp."""
    now = datetime.now(UTC)
    event_dict["timestamp"] = now.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    return event_dict


def reorder_keys(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Put level and timestamp first so JSON lines scan well."""
    ordered: EventDict = {}
    for name in ("level", "timestamp"):
        if name in event_dict:
            ordered[name] = event_dict.pop(name)
    ordered.update(event_dict)
    return ordered


def _resolve_level(log_level: str, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    return getattr(logging, log_level.upper(), logging.INFO)


def configure_logging(json_logs: bool = True, log_level: str = "INFO", debug: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    ``debug`` overrides ``log_level`` and turns on DEBUG output, which is
    where the no-op directory calls and per-object round trips are logged.
    """
    level = _resolve_level(log_level, debug)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        utc_timestamper,
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if json_logs:
        renderers: list[Processor] = [reorder_keys, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)

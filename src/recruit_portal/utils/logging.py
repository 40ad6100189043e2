"""Logging setup for the portal client: structlog events, rich console output."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler

from recruit_portal.config import settings


def configure_logging(level: Optional[str] = None, debug: Optional[bool] = None) -> None:
    """
    Route structlog events to stderr.

    Debug mode renders events for humans; otherwise each event is one JSON
    line, so command output on stdout stays clean.
    """
    level_name = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    use_console = settings.debug if debug is None else debug

    # Third-party libraries (httpx) log through the stdlib
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=True)],
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer() if use_console else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Module logger; components bind their own ``component`` key on top."""
    return structlog.get_logger(name)


def log_request(method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
    """Event fields describing one gateway call."""
    return {
        "method": method,
        "path": path,
        "parameters": {k: v for k, v in kwargs.items() if not k.startswith("_") and v is not None},
    }

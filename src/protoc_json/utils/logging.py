"""Logging for protoc-json, built on structlog."""

import logging
import sys
from typing import Optional, TextIO

import structlog


def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> None:
    """Route log events to ``stream`` (stderr by default).

    stdout is left to the JSON document. Debug events such as the file being
    parsed only appear with ``verbose``.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        # main() reconfigures per call; cached loggers would keep a stale stream.
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name)

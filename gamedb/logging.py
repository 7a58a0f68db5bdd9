from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(log_level: str, log_format: str = "json") -> None:
    # Rendered lines are handed to stdlib logging, which writes them (and pymongo's own records) to stderr.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level.upper())
    renderer = (
        structlog.dev.ConsoleRenderer(colors=False) if log_format == "console" else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(log_level.upper())),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def flush_logging() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


logger = structlog.get_logger()

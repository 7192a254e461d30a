"""
Flatmerkle - Logging Configuration

The library only emits through ``structlog.get_logger(__name__)``. This
module is an opt-in for applications that want those events rendered: it
configures structlog and attaches one handler to the ``flatmerkle``
logger namespace, leaving the root logger alone.
"""

import logging
import sys
from typing import TextIO

import structlog

from flatmerkle.core.config import settings

LOGGER_NAMESPACE = "flatmerkle"


def setup_logging(
    level: str | None = None,
    use_json: bool | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure structured logging for the flatmerkle namespace.

    Safe to call more than once; the handler installed by a previous call
    is replaced.

    Args:
        level: Log level name (defaults to LOG_LEVEL)
        use_json: Render JSON instead of console output (defaults to
            ENV == "production")
        stream: Output stream (defaults to stdout)

    Returns:
        The configured ``flatmerkle`` stdlib logger
    """
    level = (level or settings.LOG_LEVEL).upper()
    if use_json is None:
        use_json = settings.ENV == "production"
    stream = stream or sys.stdout

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(logger.handlers):
        if getattr(handler, "_flatmerkle", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._flatmerkle = True
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level))

    return logger

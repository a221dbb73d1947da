"""
Logging Setup
=============

Every module logs through ``logging.getLogger(__name__)``; loguru owns the
output. ``setup_logging`` installs a single loguru sink on stderr (JSON
lines in production, coloured lines otherwise) and routes the standard
library loggers into it, including uvicorn, fastapi and sqlalchemy.
"""

import logging
import sys
from typing import Optional

from loguru import logger

from poiquery.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers that install their own handlers
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the frames that belong to the logging package itself
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(json_logs: Optional[bool] = None, level: Optional[str] = None) -> None:
    """
    Replace every existing handler with a single loguru sink.

    Args:
        json_logs: Serialize records as JSON. Defaults to True in production.
        level: Minimum level. Defaults to DEBUG when settings.DEBUG is set,
            INFO otherwise.
    """
    if json_logs is None:
        json_logs = settings.is_production
    if level is None:
        level = "DEBUG" if settings.DEBUG else "INFO"

    logger.remove()
    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            serialize=True,
            level=level,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = [InterceptHandler()]
        routed.propagate = False

"""Loguru sink configuration for applications embedding signed-csrf.

The library only emits records through ``loguru.logger``; it never adds
sinks on import. Applications call configure_logging() once at startup
if they want the library's verification warnings on a sink of their own.
"""

import sys
from typing import Any, Optional

from loguru import logger

from .config import Config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None, sink: Any = None) -> int:
    """
    Validate configuration, then replace loguru's default handler with a formatted one.

    Args:
        level: Minimum level (defaults to Config.LOG_LEVEL)
        sink: Any loguru sink (defaults to stderr)

    Returns:
        Handler id, usable with logger.remove()

    Raises:
        ValueError: If Config.validate() fails; existing handlers are kept
    """
    Config.validate()

    logger.remove()  # Remove default handler
    return logger.add(
        sink if sink is not None else sys.stderr,
        format=LOG_FORMAT,
        level=(level or Config.LOG_LEVEL).upper(),
    )

"""Runtime logging helpers."""

from __future__ import annotations

import sys

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[sender]} | {message}"
_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str = "INFO") -> None:
    """Configure process-level logging once."""
    global _CONFIGURED_LEVEL
    level = level.upper()
    if level == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.configure(extra={"sender": "-"})
    logger.add(
        sys.stderr,
        level=level,
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = level

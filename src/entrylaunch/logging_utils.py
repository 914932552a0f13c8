"""Runtime logging helpers."""

from __future__ import annotations

import sys
from logging import Handler

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

from entrylaunch.config import LogProfile

_PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"


def _build_rich_handler() -> Handler:
    return RichHandler(
        console=Console(stderr=True),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(level: str = "WARNING", *, profile: LogProfile = "default") -> None:
    """Route launcher logs to stderr, next to the control markers."""
    logger.remove()
    if profile == "rich":
        logger.add(
            _build_rich_handler(),
            level=level.upper(),
            format="{message}",
            backtrace=False,
            diagnose=False,
        )
        return
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=_PLAIN_FORMAT,
        backtrace=False,
        diagnose=False,
    )

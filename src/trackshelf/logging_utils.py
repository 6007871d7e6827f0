"""Loguru setup for the trackshelf command line."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_logging(level: str = "WARNING", log_file: Path | str | None = None) -> None:
    """Replace loguru's default handler with a stderr sink at *level*.

    When *log_file* is given, everything from DEBUG up is also written there,
    rotated at 10 MB.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)

    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            rotation="10 MB",
            retention=5,
            level="DEBUG",
            format=FILE_FORMAT,
        )
        logger.debug(f"Logging to {log_path} (console level={level})")

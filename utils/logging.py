"""Logging configuration for ani-match using loguru.

Two sinks, both driven by settings.logging:
- stderr: WARNING by default, DEBUG with --debug
- ani-match.log under the data path, rotated and zipped

Use get_logger(__name__) in every module. Reconciliation decisions (slug
tried, strategy that matched) log at DEBUG/INFO, soft failures at WARNING.
"""

import sys

from loguru import logger as _base_logger

from models.config import settings

LOG_FILE_NAME = "ani-match.log"

CONSOLE_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}"

_initialized = False


def configure_logging(debug: bool = False) -> None:
    """Install the stderr and file sinks once per process.

    Args:
        debug: Lower the stderr level to DEBUG
    """
    global _initialized

    if _initialized:
        return

    config = settings.logging
    config.log_dir.mkdir(parents=True, exist_ok=True)

    _base_logger.remove()
    _base_logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if debug else config.console_level,
    )
    # Thread name in the file log: the CLI reconciles several ids concurrently
    _base_logger.add(
        config.log_dir / LOG_FILE_NAME,
        format=FILE_FORMAT,
        level=config.file_level,
        rotation=config.rotation,
        retention=config.retention,
        compression="zip",
        enqueue=True,
    )

    _initialized = True


def get_logger(name: str):
    """Logger bound to a module name.

    Sinks are left to the entry point (configure_logging); library use and
    tests keep loguru's default stderr sink.
    """
    return _base_logger.bind(name=name)

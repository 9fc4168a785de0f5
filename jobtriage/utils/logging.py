"""Centralized logging configuration for jobtriage."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from jobtriage.config.schema import LoggingConfig


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False
) -> None:
    """
    Configure global logging sinks.

    Library code only logs; the host application calls this once at startup.

    Args:
        level: Minimum level for console output (default: INFO)
        log_file: Optional path for a persistent log file
        verbose: If True, set console level to DEBUG (shows per-job timings)
    """
    logger.remove()

    console_level = "DEBUG" if verbose else level

    logger.add(
        sys.stderr,
        level=console_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        backtrace=True,
        diagnose=False,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            enqueue=True,  # Safe for async callers
        )

    logger.debug(f"Logging initialized. Console level: {console_level}, File: {log_file}")


def configure_logging_from_config(config: LoggingConfig) -> None:
    """Configure logging from the ``logging`` section of the config file."""
    configure_logging(
        level=config.level,
        log_file=Path(config.log_file).expanduser() if config.log_file else None,
        verbose=config.verbose,
    )

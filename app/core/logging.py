"""
Logging configuration for the application.

This module sets up logging with different levels for different environments.
It uses loguru for more advanced logging capabilities.
"""

import sys

from loguru import logger

from .config import settings, Environment


def setup_logging() -> None:
    """Set up logging configuration based on the environment."""

    # Remove default logger
    logger.remove()

    log_format = settings.logging.format

    if settings.environment == Environment.PRODUCTION:
        # Production logging - structured, one JSON object per line
        logger.add(
            sys.stdout,
            format=log_format,
            level=settings.logging.level,
            colorize=False,
            serialize=True,
        )
    else:
        logger.add(
            sys.stdout,
            format=log_format,
            level=settings.logging.level,
            colorize=True,
            backtrace=True,
            diagnose=settings.environment != Environment.TESTING,
        )

    if settings.logging.file_enabled:
        logger.add(
            settings.logging.file_path,
            format=log_format,
            level=settings.logging.level,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )

    logger.info(f"Logging initialized for environment: {settings.environment.value}")


# Initialize logging
setup_logging()

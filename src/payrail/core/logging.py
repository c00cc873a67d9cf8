"""Centralized logging configuration for PayRail."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure and return the application logger.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        The configured ``payrail`` logger.
    """
    log_format = "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logger = logging.getLogger("payrail")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Calling twice must not stack handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the payrail namespace.

    Usage:
        from payrail.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Flushing pending ACH entries")
    """
    if name == "payrail" or name.startswith("payrail."):
        return logging.getLogger(name)
    return logging.getLogger(f"payrail.{name}")

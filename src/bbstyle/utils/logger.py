"""Minimal logging utilities for bbstyle.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from bbstyle.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Found: '[b]'")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "bbstyle." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> get_logger("resolver").name
        'bbstyle.resolver'
    """
    if not (name == "bbstyle" or name.startswith("bbstyle.")):
        name = f"bbstyle.{name}"
    return logging.getLogger(name)

"""Utility modules for bbstyle.

Provides:
- logger: get_logger for logging
"""

from bbstyle.utils.logger import get_logger

__all__ = [
    "get_logger",
]

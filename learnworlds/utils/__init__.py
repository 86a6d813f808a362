"""Utility modules for the client.

Includes:
- Logging configuration
- Operation timing
"""

from .logging_config import setup_logging, get_logger
from .timing import timed_operation

__all__ = [
    "setup_logging",
    "get_logger",
    "timed_operation",
]

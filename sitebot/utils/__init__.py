"""
Utilities module for SiteBot.
"""

from .logging import get_logger, setup_logging
from .helpers import Timer, format_duration, retry_on_exception, run_with_timeout

__all__ = [
    "get_logger",
    "setup_logging",
    "Timer",
    "format_duration",
    "retry_on_exception",
    "run_with_timeout",
]

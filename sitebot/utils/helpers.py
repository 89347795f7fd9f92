"""
Helper utilities for SiteBot.
"""

import functools
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, List, Optional

from ..errors import ResponseTimeout


def format_duration(seconds: float) -> str:
    """Format duration in seconds as human-readable string."""
    if seconds < 1:
        return f"{seconds*1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"


def chunk_list(lst: List, chunk_size: int) -> List[List]:
    """Split a list into chunks of specified size."""
    return [lst[i:i + chunk_size] for i in range(0, len(lst), chunk_size)]


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to specified length with optional suffix."""
    if len(text) <= max_length:
        return text

    if len(suffix) >= max_length:
        return text[:max_length]

    return text[:max_length - len(suffix)] + suffix


def retry_on_exception(max_retries: int = 3, delay: float = 1.0,
                       backoff: float = 2.0, exceptions: tuple = (Exception,),
                       retry_if: Optional[Callable[[Exception], bool]] = None):
    """Decorator to retry function calls on specified exceptions.

    ``retry_if`` narrows the retried errors further; an exception it rejects
    is raised straight away.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries or (retry_if is not None and not retry_if(e)):
                        raise
                    time.sleep(current_delay)
                    current_delay *= backoff

        return wrapper
    return decorator


def run_with_timeout(func: Callable, timeout: float, *args, **kwargs) -> Any:
    """Run ``func`` on a worker thread and give up after ``timeout`` seconds.

    When the deadline fires the call is abandoned: the worker is left to
    finish in the background, its result is discarded, and ``ResponseTimeout``
    is raised immediately. Exceptions raised by ``func`` propagate unchanged.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sitebot-deadline")
    future = executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        if future.done():
            # Finished right at the deadline, or func raised TimeoutError itself
            # (the same class as the futures timeout on Python 3.11+)
            return future.result()
        future.cancel()
        raise ResponseTimeout(f"Request timed out (>{timeout:g}s)") from None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class Timer:
    """Simple timer context manager."""

    def __init__(self, name: str = "Operation"):
        """Initialize timer with optional name."""
        self.name = name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        """Start timing."""
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timing."""
        self.end_time = time.time()

    @property
    def elapsed(self) -> float:
        """Get elapsed time in seconds."""
        if self.start_time is None:
            return 0.0

        end = self.end_time if self.end_time else time.time()
        return end - self.start_time

    def __str__(self) -> str:
        """String representation of timer."""
        return f"{self.name}: {format_duration(self.elapsed)}"

"""
Internal utility functions for bluedot.
"""

from datetime import date, datetime
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

R = TypeVar("R")

DATE_FORMAT = "%Y-%m-%d"


def parse_calendar_date(value: Any) -> date:
    """
    Normalize a date-like value to a day-precision ``datetime.date``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    timestamps (with or without a ``Z`` suffix). Any time-of-day component
    is dropped.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not a date: {value!r}")

    if "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return datetime.strptime(value, DATE_FORMAT).date()


def format_calendar_date(value: date) -> str:
    """Format a calendar date as ``YYYY-MM-DD``."""
    return value.strftime(DATE_FORMAT)


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    Add a blocking ``.sync`` attribute to an async helper.

    Example:
        >>> @add_sync_version
        ... async def my_async_func(x):
        ...     return x * 2

        >>> result = my_async_func.sync(5)
    """
    from .sync import run_sync

    @wraps(async_fn)
    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        return run_sync(async_fn, *args, **kwargs)

    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn

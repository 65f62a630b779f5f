"""
Synchronous wrapper functions for bluedot.

This module provides blocking versions of the async helpers for users who
cannot use async/await syntax. Each call runs the helper to completion in a
fresh event loop.

Usage:
    # Instead of this async code:
    async with WaterbodyClient() as client:
        detail = await client.fetch_detail(2307)

    # Use this sync code:
    from bluedot.sync import fetch_waterbody_sync
    detail = fetch_waterbody_sync(2307)
"""

import asyncio
from datetime import date
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, TypeVar

if TYPE_CHECKING:
    from .models import Geometry, SelectionState, WaterbodyDetail, WaterbodySummary

R = TypeVar("R")


def run_sync(async_fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any) -> R:
    """Run an async helper to completion and return its result.

    Raises:
        RuntimeError: If called from within a running event loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(async_fn(*args, **kwargs))
    raise RuntimeError(
        "Cannot use sync version from within an existing asyncio event loop. "
        "Use the async version instead."
    )


def list_waterbodies_sync(client: Optional[Any] = None) -> "List[WaterbodySummary]":
    """Synchronous version of list_waterbodies.

    Examples:
        >>> summaries = list_waterbodies_sync()
        >>> [s.name for s in summaries][:3]
    """
    from .convenience import list_waterbodies

    return run_sync(list_waterbodies, client=client)


def fetch_waterbody_sync(
    waterbody_id: int, client: Optional[Any] = None
) -> "WaterbodyDetail":
    """Synchronous version of fetch_waterbody.

    Examples:
        >>> detail = fetch_waterbody_sync(2307)
        >>> detail.to_pandas().tail()
    """
    from .convenience import fetch_waterbody

    return run_sync(fetch_waterbody, waterbody_id, client=client)


def fetch_measurement_outline_sync(
    waterbody_id: int, measurement_date: date, client: Optional[Any] = None
) -> "Optional[Geometry]":
    """Synchronous version of fetch_measurement_outline."""
    from .convenience import fetch_measurement_outline

    return run_sync(
        fetch_measurement_outline, waterbody_id, measurement_date, client=client
    )


def resolve_view_sync(path: str = "/", client: Optional[Any] = None) -> "SelectionState":
    """Synchronous version of resolve_view."""
    from .convenience import resolve_view

    return run_sync(resolve_view, path, client=client)

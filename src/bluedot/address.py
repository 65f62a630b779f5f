"""
Two-way mapping between the selection state and the address path.

Canonical paths have the form ``{base}/{waterbody_id}/{YYYY-MM-DD}``. The
synchronizer reads the initial location, pushes a new history entry when
the rendered state changes, and replays back/forward (pop) events as the
smallest controller transition that reaches the popped path.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple

from .config import BluedotConfig
from .controller import SelectionController
from .models import SelectionState
from .utils import format_calendar_date, parse_calendar_date

logger = logging.getLogger(__name__)

# Both segments optional; exact match with an optional trailing slash
ROUTE_PATTERN = re.compile(
    r"^(?:/(?P<id>\d+))?(?:/(?P<date>\d{4}-\d{2}-\d{2}))?/?$"
)

PopListener = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class Route:
    """Parsed view descriptor. ``date`` is only ever set together with an id."""

    waterbody_id: Optional[int] = None
    date: Optional[date] = None


def _normalize_base(base_path: str) -> str:
    base = "/" + base_path.strip("/")
    return "" if base == "/" else base


def parse_path(path: str, base_path: str = "/") -> Optional[Route]:
    """
    Parse an address path into a ``Route``.

    Returns ``None`` when the path does not match the route grammar (or lies
    outside ``base_path``); callers render a not-found view for it.
    """
    base = _normalize_base(base_path)
    if base:
        if path != base and not path.startswith(base + "/"):
            return None
        path = path[len(base):]

    match = ROUTE_PATTERN.match(path or "/")
    if match is None:
        return None

    raw_id = match.group("id")
    raw_date = match.group("date")
    if raw_id is None:
        # A date without a waterbody cannot be resolved
        return Route()

    route_date = None
    if raw_date is not None:
        try:
            route_date = parse_calendar_date(raw_date)
        except ValueError:
            logger.debug(f"Ignoring impossible date segment {raw_date!r}")

    return Route(waterbody_id=int(raw_id), date=route_date)


def format_path(waterbody_id: int, measurement_date: date, base_path: str = "/") -> str:
    """Build the canonical path for a waterbody and observation date."""
    return (
        f"{_normalize_base(base_path)}/{waterbody_id}/"
        f"{format_calendar_date(measurement_date)}"
    )


def canonical_path(state: SelectionState, base_path: str = "/") -> Optional[str]:
    """Canonical path for a settled state, ``None`` while nothing is selected."""
    if state.waterbody_id is None or state.selected_date is None:
        return None
    return format_path(state.waterbody_id, state.selected_date, base_path)


class HistoryPort(Protocol):
    """Browser history as seen by the synchronizer."""

    def read_initial_location(self) -> str: ...

    def push_canonical_location(self, path: str) -> None: ...

    def subscribe(self, listener: PopListener) -> Callable[[], None]: ...


class MemoryHistory:
    """
    In-memory history stack implementing ``HistoryPort``.

    ``back`` and ``forward`` move through the stack and notify subscribers
    the way a browser delivers pop events.
    """

    def __init__(self, initial_path: str = "/"):
        self.entries: List[str] = [initial_path]
        self.index = 0
        self._listeners: List[PopListener] = []

    @property
    def location(self) -> str:
        return self.entries[self.index]

    def read_initial_location(self) -> str:
        return self.location

    def push_canonical_location(self, path: str) -> None:
        del self.entries[self.index + 1 :]
        self.entries.append(path)
        self.index += 1

    def subscribe(self, listener: PopListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def back(self) -> None:
        if self.index == 0:
            return
        self.index -= 1
        await self._pop()

    async def forward(self) -> None:
        if self.index >= len(self.entries) - 1:
            return
        self.index += 1
        await self._pop()

    async def _pop(self) -> None:
        path = self.location
        for listener in list(self._listeners):
            await listener(path)


class AddressSync:
    """
    Keeps a ``SelectionController`` and a ``HistoryPort`` consistent.

    Examples:
        >>> history = MemoryHistory("/2307/2019-05-04")
        >>> sync = AddressSync(controller, history)
        >>> await sync.start()
    """

    def __init__(
        self,
        controller: SelectionController,
        history: HistoryPort,
        config: Optional[BluedotConfig] = None,
    ):
        self.controller = controller
        self.history = history
        self.config = config or controller.config
        self.not_found = False
        self._current_path: Optional[str] = None
        self._last_selection: Optional[Tuple[Optional[int], Optional[date]]] = None
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def base_path(self) -> str:
        return self.config.base_path

    @property
    def current_path(self) -> Optional[str]:
        return self._current_path

    async def start(self) -> SelectionState:
        """Parse the initial location and load the view it describes."""
        path = self.history.read_initial_location()
        self._current_path = path
        state = self.controller.state
        self._last_selection = (state.waterbody_id, state.selected_date)
        self._unsubscribers = [
            self.controller.subscribe(self._on_state_change),
            self.history.subscribe(self.on_pop),
        ]

        route = parse_path(path, self.base_path)
        if route is None:
            logger.info(f"No route matches {path!r}")
            self.not_found = True
            return self.controller.state

        return await self._load(route)

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def _load(self, route: Route) -> SelectionState:
        waterbody_id = route.waterbody_id
        if waterbody_id is None:
            waterbody_id = self.controller.default_waterbody_id
        return await self.controller.select_waterbody(
            waterbody_id, requested_date=route.date
        )

    def _on_state_change(self, state: SelectionState) -> None:
        # Push only when the rendered (waterbody, date) pair moves; loading
        # and failure snapshots leave the pair as it was
        selection = (state.waterbody_id, state.selected_date)
        if selection == self._last_selection:
            return
        self._last_selection = selection
        if state.detail is None or state.detail.id != state.waterbody_id:
            return
        path = canonical_path(state, self.base_path)
        if path is None:
            return
        if path == self._current_path:
            logger.debug(f"Address already at {path}")
            return
        self.history.push_canonical_location(path)
        self._current_path = path
        self.not_found = False

    async def on_pop(self, path: str) -> None:
        """Replay a back/forward navigation as the smallest state change."""
        previous_path = self._current_path
        self._current_path = path

        route = parse_path(path, self.base_path)
        if route is None:
            self.not_found = True
            return
        self.not_found = False

        previous = parse_path(previous_path, self.base_path) if previous_path else None
        if previous is None or route.waterbody_id != previous.waterbody_id:
            await self._load(route)
            return

        if route.date is None or route.date == previous.date:
            return

        state = self.controller.state
        if state.detail is not None and state.waterbody_id == route.waterbody_id:
            await self.controller.select_date(route.waterbody_id, route.date)
        else:
            await self._load(route)

"""
Selection state machine shared by all views.

The controller owns the single ``SelectionState`` and is the only place it
changes. Every transition replaces the snapshot and notifies subscribers
synchronously, so a listener (for example the address synchronizer) sees
the waterbody, date and outline of one completion together.

States::

    IDLE --select_waterbody--> LOADING --ok--> READY
                                  |  \\--not found, no fallback left--> ERROR
                                  \\--transient failure--> READY (prior view kept) | ERROR

Superseded detail requests and stale outline responses are discarded using
monotonically increasing generation counters.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, List, Optional, Protocol

from .config import BluedotConfig
from .exceptions import (
    BluedotError,
    EmptyMeasurementsError,
    InvalidSelectionError,
    WaterbodyNotFoundError,
)
from .models import (
    ErrorKind,
    Geometry,
    SelectionState,
    SelectionStatus,
    WaterbodyDetail,
    WaterbodySummary,
)
from .navigation import next_date, prev_date

logger = logging.getLogger(__name__)

Listener = Callable[[SelectionState], None]


class WaterbodyRepository(Protocol):
    """The data access surface the controller depends on."""

    async def list_summaries(self) -> List[WaterbodySummary]: ...

    async def fetch_detail(self, waterbody_id: int) -> WaterbodyDetail: ...

    async def fetch_measurement_outline(
        self, waterbody_id: int, measurement_date: date
    ) -> Optional[Geometry]: ...


class SelectionController:
    """
    Owns ``{waterbody, date, outline, loading, search string, error}``.

    Args:
        repository: Source of summaries, details and outlines
            (usually a ``WaterbodyClient``).
        config: Supplies the default waterbody used as not-found fallback.
    """

    def __init__(
        self,
        repository: WaterbodyRepository,
        config: Optional[BluedotConfig] = None,
    ):
        self.repository = repository
        self.config = config or BluedotConfig()
        self.summaries: List[WaterbodySummary] = []
        self._state = SelectionState()
        self._listeners: List[Listener] = []
        self._detail_generation = 0
        self._outline_generation = 0

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def default_waterbody_id(self) -> int:
        return self.config.default_waterbody_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, **changes: Any) -> SelectionState:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    async def load_summaries(self) -> List[WaterbodySummary]:
        """Fetch the summary list; a failure keeps the previous list."""
        try:
            self.summaries = await self.repository.list_summaries()
        except BluedotError as e:
            logger.error(f"Waterbody list unavailable: {e}")
        return self.summaries

    def on_search_string_change(self, search_string: str) -> SelectionState:
        return self._commit(search_string=search_string)

    async def select_waterbody(
        self,
        waterbody_id: int,
        search_string: str = "",
        requested_date: Optional[date] = None,
    ) -> SelectionState:
        """
        Load a waterbody and select its initial date.

        The initial date is ``requested_date`` when it is one of the validated
        measurement dates, otherwise the most recent measurement. An unknown
        id is retried once with the default waterbody. Failures are recorded
        on the returned state, never raised.
        """
        self._detail_generation += 1
        generation = self._detail_generation

        self._commit(
            status=SelectionStatus.LOADING,
            loading=True,
            search_string=search_string,
        )

        detail: Optional[WaterbodyDetail] = None
        fetched_id = waterbody_id
        try:
            detail = await self.repository.fetch_detail(waterbody_id)
        except WaterbodyNotFoundError as e:
            logger.warning(f"Waterbody #{waterbody_id} not found: {e}")
            if self._is_superseded(generation):
                return self._state
            if waterbody_id == self.default_waterbody_id:
                return self._fail(ErrorKind.NOT_FOUND, str(e))

            fetched_id = self.default_waterbody_id
            logger.info(f"Falling back to default waterbody #{fetched_id}")
            try:
                detail = await self.repository.fetch_detail(fetched_id)
            except EmptyMeasurementsError as fallback_error:
                if self._is_superseded(generation):
                    return self._state
                return self._fail_empty(fetched_id, fallback_error)
            except BluedotError as fallback_error:
                logger.error(f"Default waterbody #{fetched_id} failed: {fallback_error}")
                if self._is_superseded(generation):
                    return self._state
                return self._fail(ErrorKind.FATAL_SELECTION, str(fallback_error))
        except EmptyMeasurementsError as e:
            if self._is_superseded(generation):
                return self._state
            return self._fail_empty(waterbody_id, e)
        except BluedotError as e:
            logger.error(f"Fetching waterbody #{waterbody_id} failed: {e}")
            if self._is_superseded(generation):
                return self._state
            return self._fail_transient(str(e))

        if self._is_superseded(generation):
            return self._state

        if requested_date is not None and detail.has_date(requested_date):
            selected = requested_date
        else:
            if requested_date is not None:
                logger.debug(
                    f"Requested date {requested_date} is not a valid measurement "
                    f"of waterbody #{fetched_id}, using the latest one"
                )
            selected = detail.last_date

        outline_generation = self._next_outline_generation()
        self._commit(
            status=SelectionStatus.READY,
            waterbody_id=fetched_id,
            selected_date=selected,
            detail=detail,
            measurement_outline=None,
            loading=False,
            error=None,
            error_message=None,
        )
        await self._load_outline(fetched_id, selected, outline_generation)
        return self._state

    async def select_date(
        self, waterbody_id: int, measurement_date: date
    ) -> SelectionState:
        """
        Select an observation date of the loaded waterbody.

        The date is trusted as given; callers pass dates coming from
        navigation, chart points or an already validated route.

        Raises:
            InvalidSelectionError: ``waterbody_id`` is not the loaded waterbody.
        """
        detail = self._state.detail
        if detail is None or self._state.waterbody_id != waterbody_id:
            raise InvalidSelectionError(
                f"Waterbody #{waterbody_id} is not loaded, cannot select {measurement_date}"
            )

        generation = self._next_outline_generation()
        if measurement_date != self._state.selected_date:
            self._commit(
                selected_date=measurement_date,
                measurement_outline=None,
                error=None,
                error_message=None,
            )
        else:
            self._commit(
                selected_date=measurement_date, error=None, error_message=None
            )
        await self._load_outline(waterbody_id, measurement_date, generation)
        return self._state

    async def select_previous(self) -> SelectionState:
        """Step to the previous measurement date, if there is one."""
        state = self._state
        if state.detail is None or state.selected_date is None:
            return state
        target = prev_date(state.detail.measurements, state.selected_date)
        if target is None:
            return state
        return await self.select_date(state.detail.id, target)

    async def select_next(self) -> SelectionState:
        """Step to the next measurement date, if there is one."""
        state = self._state
        if state.detail is None or state.selected_date is None:
            return state
        target = next_date(state.detail.measurements, state.selected_date)
        if target is None:
            return state
        return await self.select_date(state.detail.id, target)

    def _is_superseded(self, generation: int) -> bool:
        if generation != self._detail_generation:
            logger.debug(f"Discarding superseded waterbody request #{generation}")
            return True
        return False

    def _next_outline_generation(self) -> int:
        self._outline_generation += 1
        return self._outline_generation

    async def _load_outline(
        self, waterbody_id: int, measurement_date: date, generation: int
    ) -> None:
        try:
            outline = await self.repository.fetch_measurement_outline(
                waterbody_id, measurement_date
            )
        except BluedotError as e:
            logger.error(
                f"Outline for #{waterbody_id} on {measurement_date} failed: {e}"
            )
            return

        state = self._state
        if (
            generation != self._outline_generation
            or state.waterbody_id != waterbody_id
            or state.selected_date != measurement_date
        ):
            logger.debug(
                f"Discarding stale outline for #{waterbody_id} on {measurement_date}"
            )
            return
        if outline is None:
            return
        self._commit(measurement_outline=outline)

    def _fail(self, kind: ErrorKind, message: str) -> SelectionState:
        return self._commit(
            status=SelectionStatus.ERROR,
            waterbody_id=None,
            selected_date=None,
            detail=None,
            measurement_outline=None,
            loading=False,
            error=kind,
            error_message=message,
        )

    def _fail_empty(
        self, waterbody_id: int, error: EmptyMeasurementsError
    ) -> SelectionState:
        logger.error(str(error))
        return self._commit(
            status=SelectionStatus.ERROR,
            waterbody_id=waterbody_id,
            selected_date=None,
            detail=None,
            measurement_outline=None,
            loading=False,
            error=ErrorKind.EMPTY_MEASUREMENTS,
            error_message=str(error),
        )

    def _fail_transient(self, message: str) -> SelectionState:
        # A working view is kept on screen; the failure is only recorded
        if self._state.detail is not None:
            return self._commit(
                status=SelectionStatus.READY,
                loading=False,
                error=ErrorKind.TRANSIENT,
                error_message=message,
            )
        return self._commit(
            status=SelectionStatus.ERROR,
            loading=False,
            error=ErrorKind.TRANSIENT,
            error_message=message,
        )

"""
Tests for route parsing and address/state synchronization.
"""

import asyncio
from datetime import date

import pytest

from bluedot.address import (
    AddressSync,
    MemoryHistory,
    Route,
    canonical_path,
    format_path,
    parse_path,
)
from bluedot.config import BluedotConfig
from bluedot.controller import SelectionController
from bluedot.models import SelectionState

DEFAULT_ID = 2307


class TestRouteGrammar:
    """Test parsing and formatting of address paths."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/", Route()),
            ("", Route()),
            ("/5", Route(5)),
            ("/5/", Route(5)),
            ("/5/2020-03-01", Route(5, date(2020, 3, 1))),
            ("/5/2020-03-01/", Route(5, date(2020, 3, 1))),
            # A date without an id is dropped
            ("/2020-03-01", Route()),
            # Matches the grammar but is no real calendar date
            ("/5/2020-13-45", Route(5)),
        ],
    )
    def test_parse(self, path, expected):
        assert parse_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        ["/abc", "/5/2020-3-1", "/5/2020-03-01/extra", "/-5", "/5/x", "//5"],
    )
    def test_parse_not_found(self, path):
        assert parse_path(path) is None

    def test_base_path(self):
        assert parse_path("/observatory/5/2020-03-01", "/observatory/") == Route(
            5, date(2020, 3, 1)
        )
        assert parse_path("/observatory", "/observatory") == Route()
        assert parse_path("/5/2020-03-01", "/observatory") is None
        assert parse_path("/observatoryx/5", "/observatory") is None

    def test_format(self):
        assert format_path(5, date(2020, 3, 1)) == "/5/2020-03-01"
        assert format_path(5, date(2020, 3, 1), "/observatory/") == (
            "/observatory/5/2020-03-01"
        )

    def test_canonical_path_requires_selection(self):
        assert canonical_path(SelectionState()) is None
        assert canonical_path(
            SelectionState(waterbody_id=5, selected_date=date(2020, 1, 1))
        ) == "/5/2020-01-01"


class TestMemoryHistory:
    def test_push_truncates_forward_entries(self):
        history = MemoryHistory("/a")
        history.push_canonical_location("/b")
        history.push_canonical_location("/c")
        history.index = 0
        history.push_canonical_location("/d")

        assert history.entries == ["/a", "/d"]
        assert history.location == "/d"

    @pytest.mark.asyncio
    async def test_back_and_forward_notify(self):
        history = MemoryHistory("/a")
        history.push_canonical_location("/b")
        popped = []

        async def listener(path):
            popped.append(path)

        history.subscribe(listener)
        await history.back()
        await history.back()
        await history.forward()
        await history.forward()

        assert popped == ["/a", "/b"]


class TestAddressSync:
    """Test initial load, canonical pushes and back/forward replay."""

    async def start(self, repository, config, path):
        controller = SelectionController(repository, config)
        history = MemoryHistory(path)
        sync = AddressSync(controller, history)
        await sync.start()
        return controller, history, sync

    @pytest.mark.asyncio
    async def test_round_trip_valid_path(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-01-01"
        )

        state = controller.state
        assert (state.waterbody_id, state.selected_date) == (5, date(2020, 1, 1))
        assert history.entries == ["/5/2020-01-01"]
        assert canonical_path(state) == "/5/2020-01-01"

    @pytest.mark.asyncio
    async def test_missing_date_resolves_to_latest(self, repository, config):
        controller, history, sync = await self.start(repository, config, "/5")

        assert controller.state.selected_date == date(2020, 3, 1)
        assert history.entries == ["/5", "/5/2020-03-01"]

    @pytest.mark.asyncio
    async def test_empty_path_loads_default(self, repository, config):
        controller, history, sync = await self.start(repository, config, "/")

        assert repository.detail_calls == [DEFAULT_ID]
        assert history.location == f"/{DEFAULT_ID}/2019-05-04"

    @pytest.mark.asyncio
    async def test_unknown_id_rewrites_to_default(self, repository, config):
        controller, history, sync = await self.start(repository, config, "/999")

        assert repository.detail_calls == [999, DEFAULT_ID]
        assert history.location == f"/{DEFAULT_ID}/2019-05-04"
        assert sync.current_path == history.location

    @pytest.mark.asyncio
    async def test_not_found_path_skips_controller(self, repository, config):
        controller, history, sync = await self.start(repository, config, "/nope")

        assert sync.not_found
        assert repository.detail_calls == []
        assert history.entries == ["/nope"]

    @pytest.mark.asyncio
    async def test_select_date_pushes_once(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )

        await controller.select_date(5, date(2020, 1, 1))
        await controller.select_date(5, date(2020, 1, 1))

        assert history.entries == ["/5/2020-03-01", "/5/2020-01-01"]

    @pytest.mark.asyncio
    async def test_failed_refresh_does_not_push(self, repository, config):
        from bluedot.exceptions import TransientFetchError

        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )
        repository.errors[7] = TransientFetchError("down")

        await controller.select_waterbody(7)

        assert history.entries == ["/5/2020-03-01"]

    @pytest.mark.asyncio
    async def test_select_date_after_failed_refresh_pushes(self, repository, config):
        from bluedot.exceptions import TransientFetchError

        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )
        repository.errors[7] = TransientFetchError("down")
        await controller.select_waterbody(7)

        await controller.select_date(5, date(2020, 1, 1))

        assert history.location == "/5/2020-01-01"
        assert history.entries == ["/5/2020-03-01", "/5/2020-01-01"]

    @pytest.mark.asyncio
    async def test_select_date_while_other_waterbody_loads(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )
        gate = asyncio.Event()
        repository.detail_gates[7] = gate

        pending = asyncio.create_task(controller.select_waterbody(7))
        await asyncio.sleep(0)
        await controller.select_date(5, date(2020, 1, 1))

        assert history.location == "/5/2020-01-01"

        gate.set()
        await pending

        assert history.entries == [
            "/5/2020-03-01",
            "/5/2020-01-01",
            "/7/2020-01-01",
        ]

    @pytest.mark.asyncio
    async def test_back_with_date_change_skips_refetch(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )
        await controller.select_date(5, date(2020, 1, 1))
        calls_before = list(repository.detail_calls)

        await history.back()

        assert repository.detail_calls == calls_before
        assert controller.state.selected_date == date(2020, 3, 1)
        assert history.entries == ["/5/2020-03-01", "/5/2020-01-01"]
        assert history.index == 0

    @pytest.mark.asyncio
    async def test_back_with_id_change_refetches(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-01-01"
        )
        await controller.select_waterbody(7)
        assert history.location == "/7/2020-01-01"

        await history.back()

        assert repository.detail_calls == [5, 7, 5]
        state = controller.state
        assert (state.waterbody_id, state.selected_date) == (5, date(2020, 1, 1))
        assert len(history.entries) == 2

        await history.forward()

        assert repository.detail_calls == [5, 7, 5, 7]
        assert controller.state.waterbody_id == 7
        assert history.index == 1

    @pytest.mark.asyncio
    async def test_pop_to_not_found_and_back(self, repository, config):
        controller, history, sync = await self.start(repository, config, "/nope")
        history.push_canonical_location("/5/2020-03-01")
        await history.back()
        assert sync.not_found

        await history.forward()

        assert not sync.not_found
        assert controller.state.waterbody_id == 5

    @pytest.mark.asyncio
    async def test_base_path_round_trip(self, repository):
        config = BluedotConfig(base_path="/observatory", default_waterbody_id=DEFAULT_ID)
        controller, history, sync = await self.start(
            repository, config, "/observatory/5"
        )

        assert history.location == "/observatory/5/2020-03-01"

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, repository, config):
        controller, history, sync = await self.start(
            repository, config, "/5/2020-03-01"
        )
        sync.stop()

        await controller.select_date(5, date(2020, 1, 1))

        assert history.entries == ["/5/2020-03-01"]

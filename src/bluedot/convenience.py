"""
High-level async helpers for one-off lookups.

Each helper accepts an optional ``client``; without one a temporary
``WaterbodyClient`` is created and closed again. Every helper also has a
blocking ``.sync`` variant.
"""

from datetime import date
from typing import List, Optional

from .address import AddressSync, MemoryHistory
from .client import WaterbodyClient
from .config import BluedotConfig
from .controller import SelectionController
from .models import Geometry, SelectionState, WaterbodyDetail, WaterbodySummary
from .utils import add_sync_version


@add_sync_version
async def list_waterbodies(
    client: Optional[WaterbodyClient] = None,
) -> List[WaterbodySummary]:
    """
    List all observed waterbodies, sorted by name with unnamed ones last.

    Examples:
        >>> summaries = await list_waterbodies()
        >>> summaries = list_waterbodies.sync()
    """
    if client is not None:
        return await client.list_summaries()
    async with WaterbodyClient() as temp_client:
        return await temp_client.list_summaries()


@add_sync_version
async def fetch_waterbody(
    waterbody_id: int,
    client: Optional[WaterbodyClient] = None,
) -> WaterbodyDetail:
    """
    Fetch one waterbody with its validated measurements.

    Raises:
        WaterbodyNotFoundError: Unknown waterbody id.
        TransientFetchError: The service could not be reached.
        EmptyMeasurementsError: No usable measurement exists.
    """
    if client is not None:
        return await client.fetch_detail(waterbody_id)
    async with WaterbodyClient() as temp_client:
        return await temp_client.fetch_detail(waterbody_id)


@add_sync_version
async def fetch_measurement_outline(
    waterbody_id: int,
    measurement_date: date,
    client: Optional[WaterbodyClient] = None,
) -> Optional[Geometry]:
    """Fetch the measured outline for one date, ``None`` when unavailable."""
    if client is not None:
        return await client.fetch_measurement_outline(waterbody_id, measurement_date)
    async with WaterbodyClient() as temp_client:
        return await temp_client.fetch_measurement_outline(
            waterbody_id, measurement_date
        )


@add_sync_version
async def resolve_view(
    path: str = "/",
    config: Optional[BluedotConfig] = None,
    client: Optional[WaterbodyClient] = None,
) -> SelectionState:
    """
    Resolve an address path to the view state it describes.

    Runs the same initial-load flow as the interactive application (default
    waterbody fallback, requested date validation) and returns the settled
    state.

    Examples:
        >>> state = resolve_view.sync("/2307/2019-05-04")
        >>> state.selected_date
        datetime.date(2019, 5, 4)
    """
    config = config or (client.config if client is not None else BluedotConfig())
    if client is not None:
        return await _resolve(path, config, client)
    async with WaterbodyClient(config) as temp_client:
        return await _resolve(path, config, temp_client)


async def _resolve(
    path: str, config: BluedotConfig, client: WaterbodyClient
) -> SelectionState:
    controller = SelectionController(client, config)
    sync = AddressSync(controller, MemoryHistory(path), config)
    try:
        return await sync.start()
    finally:
        sync.stop()

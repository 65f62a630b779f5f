"""
View-state engine for satellite-observed waterbodies.

Keeps a world map, a detail map, a surface-area chart and an info panel
synchronized to one selection (waterbody, observation date) and mirrors
that selection into a shareable address path.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .address import (
    AddressSync,
    HistoryPort,
    MemoryHistory,
    Route,
    canonical_path,
    format_path,
    parse_path,
)
from .client import WaterbodyClient, sort_summaries
from .config import BluedotConfig
from .controller import SelectionController, WaterbodyRepository
from .convenience import (
    fetch_measurement_outline,
    fetch_waterbody,
    list_waterbodies,
    resolve_view,
)
from .exceptions import (
    BluedotError,
    BluedotResponseError,
    ClientError,
    EmptyMeasurementsError,
    InvalidSelectionError,
    TransientFetchError,
    WaterbodyNotFoundError,
)
from .maps import (
    WaterbodyMapConfig,
    WorldMapConfig,
    outline_bbox,
    summaries_to_geojson,
    tile_time_interval,
)
from .models import (
    ErrorKind,
    Measurement,
    SelectionState,
    SelectionStatus,
    WaterbodyDetail,
    WaterbodySummary,
)
from .navigation import (
    has_next,
    has_prev,
    next_date,
    next_measurement,
    prev_date,
    prev_measurement,
)
from .projection import (
    ChartConfig,
    ChartView,
    InfoItem,
    ViewProjector,
    area_series,
    axis_bounds,
    level_series,
    month_ticks,
    size_bucket,
    year_ticks,
)
from .search import SearchOption, search_options
from .sync import (
    fetch_measurement_outline_sync,
    fetch_waterbody_sync,
    list_waterbodies_sync,
    resolve_view_sync,
    run_sync,
)
from .validation import MeasurementValidator, dedupe_by_date, validate

__all__ = [
    # Configuration
    "BluedotConfig",
    # Data access
    "WaterbodyClient",
    "WaterbodyRepository",
    "sort_summaries",
    # Models
    "WaterbodySummary",
    "Measurement",
    "WaterbodyDetail",
    "SelectionState",
    "SelectionStatus",
    "ErrorKind",
    # Validation and navigation
    "MeasurementValidator",
    "validate",
    "dedupe_by_date",
    "prev_measurement",
    "next_measurement",
    "prev_date",
    "next_date",
    "has_prev",
    "has_next",
    # State and address synchronization
    "SelectionController",
    "AddressSync",
    "HistoryPort",
    "MemoryHistory",
    "Route",
    "parse_path",
    "format_path",
    "canonical_path",
    # Presentation
    "ViewProjector",
    "ChartConfig",
    "ChartView",
    "InfoItem",
    "axis_bounds",
    "year_ticks",
    "month_ticks",
    "size_bucket",
    "level_series",
    "area_series",
    "SearchOption",
    "search_options",
    "WorldMapConfig",
    "WaterbodyMapConfig",
    "summaries_to_geojson",
    "outline_bbox",
    "tile_time_interval",
    # Exceptions
    "BluedotError",
    "WaterbodyNotFoundError",
    "ClientError",
    "TransientFetchError",
    "BluedotResponseError",
    "EmptyMeasurementsError",
    "InvalidSelectionError",
    # Async convenience functions
    "list_waterbodies",
    "fetch_waterbody",
    "fetch_measurement_outline",
    "resolve_view",
    # Sync convenience functions
    "run_sync",
    "list_waterbodies_sync",
    "fetch_waterbody_sync",
    "fetch_measurement_outline_sync",
    "resolve_view_sync",
]

"""
Data models for observed waterbodies and the shared view state.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .utils import parse_calendar_date

if TYPE_CHECKING:
    import pandas as pd

# GeoJSON geometry / feature as decoded from the data service
Geometry = Dict[str, Any]

# Names starting with this marker are placeholders for unnamed waterbodies
PLACEHOLDER_NAME_PREFIX = "?"


@dataclass(frozen=True)
class WaterbodySummary:
    """A waterbody as listed in the overview (search list, world map)."""

    id: int
    name: str
    country: str
    lat: float
    long: float

    @property
    def is_placeholder(self) -> bool:
        """True when the waterbody has no real name yet."""
        return self.name.startswith(PLACEHOLDER_NAME_PREFIX)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.country})"

    def sort_key(self) -> Tuple[bool, str]:
        return (self.is_placeholder, self.name.lower())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaterbodySummary":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            country=str(data.get("country") or ""),
            lat=float(data.get("lat", 0)),
            long=float(data.get("long", 0)),
        )


@dataclass(frozen=True)
class Measurement:
    """One dated observation of a waterbody's surface-area level."""

    date: date
    level: float  # fraction of the nominal surface area
    cloud_coverage: float
    min_level: Optional[float] = None
    max_level: Optional[float] = None

    @property
    def level_percent(self) -> float:
        return self.level * 100.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Measurement":
        """Build a measurement from the service's raw record (``cc`` = cloud coverage)."""
        cloud_coverage = data.get("cc", data.get("cloud_coverage"))
        return cls(
            date=parse_calendar_date(data["date"]),
            level=float(data["level"]),
            cloud_coverage=float(cloud_coverage) if cloud_coverage is not None else 1.0,
            min_level=_optional_float(data.get("min_level")),
            max_level=_optional_float(data.get("max_level")),
        )


@dataclass(frozen=True)
class WaterbodyDetail:
    """A single waterbody with its nominal outline and validated measurements."""

    id: int
    name: str
    country: str
    lat: float
    long: float
    nominal_outline: Optional[Geometry]
    measurements: Tuple[Measurement, ...]
    max_level_total: Optional[float] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.country})"

    @property
    def first_date(self) -> date:
        return self.measurements[0].date

    @property
    def last_date(self) -> date:
        return self.measurements[-1].date

    @property
    def dates(self) -> List[date]:
        return [m.date for m in self.measurements]

    def has_date(self, value: date) -> bool:
        return any(m.date == value for m in self.measurements)

    def measurement_on(self, value: date) -> Optional[Measurement]:
        """Return the measurement taken on ``value``, if any."""
        for measurement in self.measurements:
            if measurement.date == value:
                return measurement
        return None

    def summary(self) -> WaterbodySummary:
        return WaterbodySummary(self.id, self.name, self.country, self.lat, self.long)

    def to_pandas(self) -> "pd.DataFrame":
        """
        Export the validated measurement series as a pandas DataFrame.

        Columns: ``date``, ``level``, ``level_percent``, ``cloud_coverage``,
        ``min_level``, ``max_level``.
        """
        import pandas as pd

        return pd.DataFrame(
            [
                {
                    "date": pd.Timestamp(m.date),
                    "level": m.level,
                    "level_percent": m.level_percent,
                    "cloud_coverage": m.cloud_coverage,
                    "min_level": m.min_level,
                    "max_level": m.max_level,
                }
                for m in self.measurements
            ],
            columns=[
                "date",
                "level",
                "level_percent",
                "cloud_coverage",
                "min_level",
                "max_level",
            ],
        )


class SelectionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Error kinds recorded on the selection state instead of being raised."""

    NOT_FOUND = "not_found"
    FATAL_SELECTION = "fatal_selection"
    TRANSIENT = "transient"
    EMPTY_MEASUREMENTS = "empty_measurements"


@dataclass(frozen=True)
class SelectionState:
    """
    Immutable snapshot of the shared view state.

    A new snapshot is published by the selection controller on every
    transition; views never mutate it.
    """

    status: SelectionStatus = SelectionStatus.IDLE
    waterbody_id: Optional[int] = None
    selected_date: Optional[date] = None
    detail: Optional[WaterbodyDetail] = None
    measurement_outline: Optional[Geometry] = None
    loading: bool = False
    search_string: str = ""
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status == SelectionStatus.READY

    @property
    def show_header_spinner(self) -> bool:
        """Loading indicator in the header, only once a waterbody is on screen."""
        return self.loading and self.detail is not None

    @property
    def selected_measurement(self) -> Optional[Measurement]:
        if self.detail is None or self.selected_date is None:
            return None
        return self.detail.measurement_on(self.selected_date)


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)

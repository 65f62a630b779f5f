"""
Values consumed by the world map and the waterbody detail map.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .models import Geometry, WaterbodySummary
from .utils import format_calendar_date

BBox = Tuple[float, float, float, float]


@dataclass(frozen=True)
class CirclePaint:
    radius: int
    color: str
    opacity: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "circle-radius": self.radius,
            "circle-color": self.color,
            "circle-opacity": self.opacity,
        }


@dataclass(frozen=True)
class LinePaint:
    color: str
    width: int = 2

    def to_dict(self) -> Dict[str, Any]:
        return {"line-color": self.color, "line-width": self.width}


@dataclass(frozen=True)
class WorldMapConfig:
    """Overview map constants: initial view, marker styles, clustering."""

    default_lat: float = -20.0
    default_lng: float = 23.0
    default_zoom: float = 0
    style: str = "mapbox://styles/mapbox/light-v9"
    cluster_max_zoom: int = 3
    cluster_radius: int = 60
    unselected: CirclePaint = CirclePaint(5, "#26accc")
    selected: CirclePaint = CirclePaint(7, "#e8c26e")
    hover: CirclePaint = CirclePaint(6, "#e8c26e")

    @property
    def cluster_click_zoom(self) -> int:
        """Zoom a cluster click jumps to, just past the clustering limit."""
        return self.cluster_max_zoom + 1


@dataclass(frozen=True)
class WaterbodyMapConfig:
    """Detail map constants: imagery instance, outline styles, zoom."""

    imagery_instance_id: str = "64b1b08d-f449-4301-b25c-47aa8bcd118b"
    imagery_layer: str = "TRUE-COLOR-S2-L1C"
    default_zoom: float = 14
    fit_bounds_padding: int = 50
    line_layout: Tuple[Tuple[str, str], ...] = field(
        default=(("line-cap", "round"), ("line-join", "round"))
    )
    nominal_outline: LinePaint = LinePaint("#26accc")
    measurement_outline: LinePaint = LinePaint("#e8c26e")

    def tile_url(self, measurement_date: date) -> str:
        """WMS tile template showing imagery of a single day."""
        interval = tile_time_interval(measurement_date)
        return (
            f"https://services.sentinel-hub.com/ogc/wms/{self.imagery_instance_id}"
            "?showLogo=false&service=WMS&request=GetMap"
            f"&layers={self.imagery_layer}&styles=&format=image%2Fjpeg"
            "&transparent=false&version=1.1.1&maxcc=100"
            f"&time={interval}&height=512&width=512&srs=EPSG%3A3857"
            "&bbox={bbox-epsg-3857}"
        )


def summaries_to_geojson(summaries: Sequence[WaterbodySummary]) -> Dict[str, Any]:
    """Waterbody markers as a GeoJSON FeatureCollection of points."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": s.id, "name": s.name},
                "geometry": {"type": "Point", "coordinates": [s.long, s.lat]},
            }
            for s in summaries
        ],
    }


def tile_time_interval(measurement_date: date) -> str:
    day = format_calendar_date(measurement_date)
    return f"{day}/{day}"


def _iter_positions(geometry: Any) -> Iterator[List[float]]:
    if isinstance(geometry, dict):
        kind = geometry.get("type")
        if kind == "FeatureCollection":
            for feature in geometry.get("features") or []:
                yield from _iter_positions(feature)
        elif kind == "Feature":
            yield from _iter_positions(geometry.get("geometry"))
        elif kind == "GeometryCollection":
            for child in geometry.get("geometries") or []:
                yield from _iter_positions(child)
        else:
            yield from _iter_positions(geometry.get("coordinates"))
    elif isinstance(geometry, (list, tuple)) and geometry:
        if isinstance(geometry[0], (int, float)):
            yield list(geometry)
        else:
            for child in geometry:
                yield from _iter_positions(child)


def outline_bbox(geometry: Optional[Geometry]) -> Optional[BBox]:
    """(min_lng, min_lat, max_lng, max_lat) of any GeoJSON object, ``None`` if empty."""
    positions = list(_iter_positions(geometry))
    if not positions:
        return None
    lngs = [p[0] for p in positions]
    lats = [p[1] for p in positions]
    return min(lngs), min(lats), max(lngs), max(lats)

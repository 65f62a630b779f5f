"""
Presentation values derived from the selection state.

Nothing here is stored: the chart, the maps and the info panel recompute
these from the current ``WaterbodyDetail`` and ``SelectionState``.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .models import Measurement, SelectionState, WaterbodyDetail
from .navigation import has_next, has_prev
from .utils import format_calendar_date

# Content width thresholds in px, smallest first
DEFAULT_BREAKPOINTS: Tuple[Tuple[str, int], ...] = (
    ("small", 576),
    ("medium", 768),
    ("large", 992),
    ("xlarge", 1200),
    ("xxlarge", 1600),
)

DEFAULT_GRAPH_HEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("small", 200),
    ("medium", 220),
    ("large", 240),
    ("xlarge", 260),
    ("xxlarge", 280),
)


@dataclass(frozen=True)
class ChartConfig:
    """Sizing constants owned by the chart."""

    breakpoints: Tuple[Tuple[str, int], ...] = DEFAULT_BREAKPOINTS
    graph_heights: Tuple[Tuple[str, int], ...] = DEFAULT_GRAPH_HEIGHTS
    margin_breakpoint: str = "large"
    horizontal_margin: int = 40
    level_padding: float = 0.1

    def height_for(self, bucket: str) -> int:
        return dict(self.graph_heights)[bucket]

    def threshold(self, bucket: str) -> int:
        return dict(self.breakpoints)[bucket]


def axis_bounds(measurements: Sequence[Measurement]) -> Tuple[date, date]:
    """First/last measurement dates widened to whole calendar months."""
    first = measurements[0].date
    last = measurements[-1].date
    start = first.replace(day=1)
    end = (pd.Timestamp(last) + pd.offsets.MonthEnd(0)).date()
    return start, end


def year_ticks(start: date, end: date) -> List[date]:
    """January 1st of every year after ``start``'s year up to ``end``'s year."""
    first = date(start.year + 1, 1, 1)
    return [ts.date() for ts in pd.date_range(first, end, freq="YS")]


def month_ticks(start: date, end: date) -> List[date]:
    """First day of every month between ``start`` and ``end``, both months included."""
    return [ts.date() for ts in pd.date_range(start.replace(day=1), end, freq="MS")]


def size_bucket(
    content_width: float, breakpoints: Sequence[Tuple[str, int]] = DEFAULT_BREAKPOINTS
) -> str:
    """
    Pick the responsive bucket for ``content_width``.

    Thresholds are scanned smallest first and every one narrower than the
    content overwrites the choice, so the last qualifying entry wins. With
    no qualifying entry the first bucket is used.
    """
    bucket = breakpoints[0][0]
    for name, width in breakpoints:
        if width < content_width:
            bucket = name
    return bucket


def level_series(
    measurements: Sequence[Measurement], selected_date: Optional[date] = None
) -> List[Dict[str, Any]]:
    """Chart points ``{x: date, y: level in %}`` with the selected point flagged."""
    return [
        {"x": m.date, "y": m.level * 100.0, "selected": m.date == selected_date}
        for m in measurements
    ]


def area_series(measurements: Sequence[Measurement]) -> List[Dict[str, Any]]:
    """
    Closed polygon under the level curve for fill rendering.

    All measurement points in order, then zero-level points at the last
    and first dates.
    """
    points = [{"x": m.date, "y": m.level * 100.0} for m in measurements]
    points.append({"x": measurements[-1].date, "y": 0.0})
    points.append({"x": measurements[0].date, "y": 0.0})
    return points


def level_extent(
    measurements: Sequence[Measurement], padding: float = 0.1
) -> Tuple[float, float]:
    """Y axis range in percent, from zero to the highest level plus padding."""
    max_level = max([0.0] + [m.level for m in measurements])
    return 0.0, (max_level + padding) * 100.0


@dataclass(frozen=True)
class InfoItem:
    value: str
    label: str


@dataclass(frozen=True)
class ChartView:
    """Everything the chart collaborator needs for one render."""

    axis_start: date
    axis_end: date
    year_ticks: List[date]
    month_ticks: List[date]
    y_extent: Tuple[float, float]
    size: Tuple[int, int]
    bucket: str
    points: List[Dict[str, Any]]
    area: List[Dict[str, Any]]
    has_prev: bool = False
    has_next: bool = False
    info: List[InfoItem] = field(default_factory=list)


class ViewProjector:
    """
    Derives chart and info-panel values from the current state.

    Examples:
        >>> projector = ViewProjector()
        >>> view = projector.project(controller.state, content_width=1280)
        >>> view.bucket
        'xlarge'
    """

    def __init__(self, config: Optional[ChartConfig] = None):
        self.config = config or ChartConfig()

    def size_bucket(self, content_width: float) -> str:
        return size_bucket(content_width, self.config.breakpoints)

    def chart_size(self, content_width: float) -> Tuple[int, int]:
        """(width, height) in px; wide layouts leave a horizontal margin."""
        margin = 0
        if content_width >= self.config.threshold(self.config.margin_breakpoint):
            margin = self.config.horizontal_margin
        bucket = self.size_bucket(content_width)
        return int(content_width - margin), self.config.height_for(bucket)

    def info_panel(
        self, detail: WaterbodyDetail, selected_date: Optional[date]
    ) -> List[InfoItem]:
        items = [InfoItem(detail.label, "water body")]
        measurement = detail.measurement_on(selected_date) if selected_date else None
        if measurement is not None:
            items.append(
                InfoItem(format_calendar_date(measurement.date), "observation date")
            )
            percent = math.floor(measurement.level * 100 + 0.5)
            items.append(InfoItem(f"{percent}%", "surface area"))
        items.append(InfoItem(str(len(detail.measurements)), "total observations"))
        return items

    def project(
        self, state: SelectionState, content_width: float
    ) -> Optional[ChartView]:
        """Build the chart view, or ``None`` while no waterbody is displayed."""
        detail = state.detail
        if detail is None or not detail.measurements:
            return None

        measurements = detail.measurements
        start, end = axis_bounds(measurements)
        selected = state.selected_date
        return ChartView(
            axis_start=start,
            axis_end=end,
            year_ticks=year_ticks(start, end),
            month_ticks=month_ticks(start, end),
            y_extent=level_extent(measurements, self.config.level_padding),
            size=self.chart_size(content_width),
            bucket=self.size_bucket(content_width),
            points=level_series(measurements, selected),
            area=area_series(measurements),
            has_prev=selected is not None and has_prev(measurements, selected),
            has_next=selected is not None and has_next(measurements, selected),
            info=self.info_panel(detail, selected),
        )

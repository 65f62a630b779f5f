"""
Tests for chart and info-panel projections.
"""

from datetime import date

import pytest

from bluedot.models import Measurement, SelectionState, SelectionStatus
from bluedot.projection import (
    ChartConfig,
    InfoItem,
    ViewProjector,
    area_series,
    axis_bounds,
    level_extent,
    level_series,
    month_ticks,
    size_bucket,
    year_ticks,
)


def series(*observations):
    return [Measurement(date=d, level=level, cloud_coverage=0.0) for d, level in observations]


class TestAxis:
    """Test axis bounds and tick generation."""

    def test_bounds_expand_to_months(self):
        measurements = series((date(2019, 11, 15), 0.5), (date(2021, 2, 10), 0.6))

        assert axis_bounds(measurements) == (date(2019, 11, 1), date(2021, 2, 28))

    def test_bounds_leap_year_and_month_end(self):
        measurements = series((date(2020, 2, 1), 0.5), (date(2020, 2, 29), 0.6))

        assert axis_bounds(measurements) == (date(2020, 2, 1), date(2020, 2, 29))

    def test_year_ticks(self):
        ticks = year_ticks(date(2019, 11, 1), date(2021, 2, 28))

        assert ticks == [date(2020, 1, 1), date(2021, 1, 1)]

    def test_year_ticks_within_single_year(self):
        assert year_ticks(date(2020, 1, 1), date(2020, 12, 31)) == []

    def test_month_ticks_include_partial_boundary_months(self):
        ticks = month_ticks(date(2019, 11, 1), date(2021, 2, 28))

        assert len(ticks) == 16
        assert ticks[0] == date(2019, 11, 1)
        assert ticks[-1] == date(2021, 2, 1)
        assert all(t.day == 1 for t in ticks)

    def test_month_ticks_single_month(self):
        assert month_ticks(date(2020, 3, 1), date(2020, 3, 31)) == [date(2020, 3, 1)]


class TestSizeBucket:
    """Test responsive size selection."""

    @pytest.mark.parametrize(
        "width, expected",
        [(300, "small"), (577, "small"), (769, "medium"), (992, "medium"),
         (1000, "large"), (1300, "xlarge"), (2000, "xxlarge")],
    )
    def test_default_breakpoints(self, width, expected):
        assert size_bucket(width) == expected

    def test_last_qualifying_entry_wins(self):
        breakpoints = (("a", 100), ("b", 900), ("c", 300))

        # Not the widest qualifying threshold, the last one scanned
        assert size_bucket(1000, breakpoints) == "c"
        assert size_bucket(500, breakpoints) == "c"
        assert size_bucket(50, breakpoints) == "a"

    def test_chart_size(self):
        projector = ViewProjector()

        assert projector.chart_size(1000) == (960, 240)
        assert projector.chart_size(800) == (800, 220)
        assert projector.chart_size(400) == (400, 200)

    def test_custom_chart_config(self):
        config = ChartConfig(
            breakpoints=(("narrow", 0), ("wide", 500)),
            graph_heights=(("narrow", 100), ("wide", 150)),
            margin_breakpoint="wide",
            horizontal_margin=10,
        )
        projector = ViewProjector(config)

        assert projector.chart_size(600) == (590, 150)
        assert projector.chart_size(400) == (400, 100)


class TestSeries:
    def test_level_series(self):
        measurements = series((date(2020, 1, 1), 0.5), (date(2020, 3, 1), 0.7))

        points = level_series(measurements, date(2020, 3, 1))

        assert [p["x"] for p in points] == [date(2020, 1, 1), date(2020, 3, 1)]
        assert points[0]["y"] == pytest.approx(50.0)
        assert points[1]["y"] == pytest.approx(70.0)
        assert [p["selected"] for p in points] == [False, True]

    def test_area_series_is_closed(self):
        measurements = series(
            (date(2020, 1, 1), 0.5), (date(2020, 2, 1), 0.6), (date(2020, 3, 1), 0.7)
        )

        area = area_series(measurements)

        assert len(area) == 5
        assert area[0] == {"x": date(2020, 1, 1), "y": pytest.approx(50.0)}
        assert area[-2] == {"x": date(2020, 3, 1), "y": 0.0}
        assert area[-1] == {"x": date(2020, 1, 1), "y": 0.0}

    def test_level_extent(self):
        measurements = series((date(2020, 1, 1), 0.5), (date(2020, 3, 1), 0.7))

        low, high = level_extent(measurements)

        assert low == 0.0
        assert high == pytest.approx(80.0)


class TestViewProjector:
    @pytest.fixture
    def detail(self, make_detail):
        return make_detail(5, [(date(2020, 1, 1), 0.5), (date(2020, 3, 1), 0.7)])

    def test_project_without_detail(self):
        assert ViewProjector().project(SelectionState(), 1000) is None

    def test_project(self, detail):
        state = SelectionState(
            status=SelectionStatus.READY,
            waterbody_id=5,
            selected_date=date(2020, 3, 1),
            detail=detail,
        )

        view = ViewProjector().project(state, 1000)

        assert (view.axis_start, view.axis_end) == (date(2020, 1, 1), date(2020, 3, 31))
        assert view.year_ticks == []
        assert view.month_ticks == [date(2020, 1, 1), date(2020, 2, 1), date(2020, 3, 1)]
        assert view.bucket == "large"
        assert view.size == (960, 240)
        assert view.has_prev and not view.has_next
        assert len(view.points) == 2
        assert len(view.area) == 4

    def test_info_panel(self, detail):
        info = ViewProjector().info_panel(detail, date(2020, 1, 1))

        assert info == [
            InfoItem("Test Lake (Testland)", "water body"),
            InfoItem("2020-01-01", "observation date"),
            InfoItem("50%", "surface area"),
            InfoItem("2", "total observations"),
        ]

    def test_info_panel_unknown_date(self, detail):
        info = ViewProjector().info_panel(detail, date(2020, 2, 1))

        assert [item.label for item in info] == ["water body", "total observations"]

"""
Shared fixtures for bluedot tests.
"""

import asyncio
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from bluedot.config import BluedotConfig
from bluedot.exceptions import BluedotError, WaterbodyNotFoundError
from bluedot.models import Measurement, WaterbodyDetail, WaterbodySummary

DEFAULT_ID = 2307


def build_detail(
    waterbody_id: int,
    observations: Sequence[Tuple[date, float]],
    name: str = "Test Lake",
    country: str = "Testland",
) -> WaterbodyDetail:
    return WaterbodyDetail(
        id=waterbody_id,
        name=name,
        country=country,
        lat=45.0,
        long=15.0,
        nominal_outline={
            "type": "Polygon",
            "coordinates": [[[15.0, 45.0], [15.2, 45.0], [15.2, 45.1], [15.0, 45.0]]],
        },
        measurements=tuple(
            Measurement(date=d, level=level, cloud_coverage=0.0)
            for d, level in observations
        ),
    )


class FakeRepository:
    """In-memory repository whose fetches can be held back with events."""

    def __init__(self, details: Optional[Dict[int, WaterbodyDetail]] = None):
        self.details = details or {}
        self.errors: Dict[int, BluedotError] = {}
        self.summaries: List[WaterbodySummary] = []
        self.detail_gates: Dict[int, asyncio.Event] = {}
        self.outline_gates: Dict[Tuple[int, date], asyncio.Event] = {}
        self.detail_calls: List[int] = []
        self.outline_calls: List[Tuple[int, date]] = []

    async def list_summaries(self) -> List[WaterbodySummary]:
        return list(self.summaries)

    async def fetch_detail(self, waterbody_id: int) -> WaterbodyDetail:
        self.detail_calls.append(waterbody_id)
        gate = self.detail_gates.get(waterbody_id)
        if gate is not None:
            await gate.wait()
        if waterbody_id in self.errors:
            raise self.errors[waterbody_id]
        if waterbody_id not in self.details:
            raise WaterbodyNotFoundError(f"Waterbody #{waterbody_id} not found")
        return self.details[waterbody_id]

    async def fetch_measurement_outline(self, waterbody_id: int, measurement_date: date):
        self.outline_calls.append((waterbody_id, measurement_date))
        gate = self.outline_gates.get((waterbody_id, measurement_date))
        if gate is not None:
            await gate.wait()
        return {
            "type": "Polygon",
            "id": f"{waterbody_id}/{measurement_date.isoformat()}",
            "coordinates": [],
        }


@pytest.fixture
def config():
    return BluedotConfig(api_root="http://test.local/api/", default_waterbody_id=DEFAULT_ID)


@pytest.fixture
def repository():
    """Waterbody #5 (two observations) and the default waterbody #2307."""
    return FakeRepository(
        {
            5: build_detail(5, [(date(2020, 1, 1), 0.5), (date(2020, 3, 1), 0.7)]),
            7: build_detail(
                7,
                [(date(2019, 6, 1), 0.3), (date(2020, 1, 1), 0.4)],
                name="Seven Lake",
            ),
            DEFAULT_ID: build_detail(
                DEFAULT_ID,
                [(date(2018, 5, 4), 0.9), (date(2019, 5, 4), 0.8)],
                name="Default Reservoir",
            ),
        }
    )


@pytest.fixture
def make_detail():
    return build_detail

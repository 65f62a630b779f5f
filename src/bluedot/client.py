"""
Waterbody data service client for bluedot.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import BluedotConfig
from .exceptions import (
    BluedotError,
    BluedotResponseError,
    EmptyMeasurementsError,
    TransientFetchError,
    WaterbodyNotFoundError,
)
from .models import Geometry, Measurement, WaterbodyDetail, WaterbodySummary
from .utils import format_calendar_date
from .validation import MeasurementValidator, dedupe_by_date

logger = logging.getLogger(__name__)


def sort_summaries(summaries: Sequence[WaterbodySummary]) -> List[WaterbodySummary]:
    """Order by case-insensitive name, placeholder names last."""
    return sorted(summaries, key=lambda s: s.sort_key())


class WaterbodyClient:
    """
    Async client for the waterbody data service.

    Endpoints (relative to ``config.api_root``):
    - ``waterbodies/`` - list of waterbody summaries
    - ``waterbodies/{id}/`` - detail with raw measurements
    - ``waterbodies/{id}/measurements/{YYYY-MM-DD}/`` - measured outline for one date
    """

    def __init__(
        self,
        config: Optional[BluedotConfig] = None,
        validator: Optional[MeasurementValidator] = None,
    ):
        self.config = config or BluedotConfig()
        self.validator = validator or MeasurementValidator(
            max_cloud_coverage=self.config.max_cloud_coverage
        )
        self.timeout = self.config.timeout
        self._summaries: List[WaterbodySummary] = []
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "User-Agent": "bluedot-client/0.1.0",
                "Accept": "application/json",
            },
        )

    @property
    def summaries(self) -> List[WaterbodySummary]:
        """Most recently fetched summary list (empty until the first success)."""
        return list(self._summaries)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "WaterbodyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _url(self, endpoint: str) -> str:
        return f"{self.config.api_root}{endpoint}"

    async def _make_request(self, endpoint: str) -> Any:
        """Make a request to the data service with error handling."""
        url = self._url(endpoint)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise TransientFetchError(f"Request timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if 400 <= status <= 499:
                raise WaterbodyNotFoundError(
                    f"Waterbody data not found (HTTP {status}): {endpoint}",
                    status_code=status,
                ) from e
            raise TransientFetchError(
                f"Waterbody service temporarily unavailable (HTTP {status})"
            ) from e
        except httpx.RequestError as e:
            raise TransientFetchError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise BluedotResponseError(f"Invalid JSON response: {e}") from e

    async def list_summaries(self) -> List[WaterbodySummary]:
        """
        Fetch all waterbody summaries, sorted for display.

        Failures are logged and leave the previously fetched list in place;
        that list (possibly empty) is returned instead.
        """
        try:
            data = await self._make_request("waterbodies/")
        except BluedotError as e:
            logger.error(f"Failed to fetch waterbody list: {e}")
            return self.summaries

        if not isinstance(data, list):
            logger.error(
                f"Unexpected waterbody list payload: {type(data).__name__}, expected list"
            )
            return self.summaries

        summaries = []
        for item in data:
            try:
                summaries.append(WaterbodySummary.from_dict(item))
            except (KeyError, ValueError, TypeError):
                # Skip malformed entries but keep the rest of the list
                logger.warning(f"Skipping malformed waterbody summary: {item!r}")
                continue

        self._summaries = sort_summaries(summaries)
        logger.info(f"Fetched {len(self._summaries)} waterbody summaries")
        return self.summaries

    async def fetch_detail(self, waterbody_id: int) -> WaterbodyDetail:
        """
        Fetch one waterbody with its validated measurements.

        Raises:
            WaterbodyNotFoundError: The service answered with a 4xx status.
            TransientFetchError: 5xx status, timeout or network failure.
            BluedotResponseError: The payload could not be interpreted.
            EmptyMeasurementsError: No measurement passed validation.
        """
        data = await self._make_request(f"waterbodies/{waterbody_id}/")
        detail = self._parse_detail(waterbody_id, data)
        if not detail.measurements:
            raise EmptyMeasurementsError(waterbody_id)
        return detail

    def _parse_detail(self, waterbody_id: int, data: Any) -> WaterbodyDetail:
        if not isinstance(data, dict):
            raise BluedotResponseError(
                f"Invalid waterbody payload: {type(data).__name__}, expected object"
            )

        # Properties arrive either nested (GeoJSON feature style) or flat
        properties: Dict[str, Any] = data.get("properties") or data

        try:
            raw = [Measurement.from_dict(m) for m in data.get("measurements") or []]
            max_level_total = data.get("max_level_total")
            if max_level_total is not None:
                max_level_total = float(max_level_total)

            measurements = self.validator.validate(raw, max_level_total)
            if self.config.dedupe_dates:
                measurements = dedupe_by_date(measurements)

            return WaterbodyDetail(
                id=int(properties.get("id", waterbody_id)),
                name=str(properties.get("name") or ""),
                country=str(properties.get("country") or ""),
                lat=float(properties.get("lat", 0)),
                long=float(properties.get("long", 0)),
                nominal_outline=data.get("nominal_outline"),
                measurements=tuple(measurements),
                max_level_total=max_level_total,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise BluedotResponseError(
                f"Failed to parse waterbody #{waterbody_id}: {e}"
            ) from e

    async def fetch_measurement_outline(
        self, waterbody_id: int, measurement_date: date
    ) -> Optional[Geometry]:
        """
        Fetch the measured outline for one (waterbody, date) pair.

        Any failure is logged and reported as ``None`` (no outline available).
        """
        endpoint = (
            f"waterbodies/{waterbody_id}/measurements/"
            f"{format_calendar_date(measurement_date)}/"
        )
        try:
            data = await self._make_request(endpoint)
        except BluedotError as e:
            logger.error(
                f"Failed to fetch outline for waterbody #{waterbody_id} "
                f"on {measurement_date}: {e}"
            )
            return None

        if not isinstance(data, dict):
            logger.warning(
                f"Ignoring outline payload of type {type(data).__name__} "
                f"for waterbody #{waterbody_id}"
            )
            return None
        return data

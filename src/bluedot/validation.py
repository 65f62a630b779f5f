"""
Measurement validation.

Raw measurements are filtered through a set of named predicates and then
sorted by date. Only the cloud-coverage predicate is active by default;
the level-bound predicates are kept as named toggles so they can be
switched on without re-deriving them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Measurement

logger = logging.getLogger(__name__)

DEFAULT_MAX_CLOUD_COVERAGE = 0.02


@dataclass(frozen=True)
class ValidationContext:
    """Per-waterbody values the predicates may consult."""

    max_cloud_coverage: float = DEFAULT_MAX_CLOUD_COVERAGE
    max_level_total: Optional[float] = None


Predicate = Callable[[Measurement, ValidationContext], bool]


def cloud_coverage_ok(measurement: Measurement, context: ValidationContext) -> bool:
    return measurement.cloud_coverage <= context.max_cloud_coverage


def level_within_bounds(measurement: Measurement, context: ValidationContext) -> bool:
    """Level lies within the measurement's own [min_level, max_level]."""
    if measurement.min_level is not None and measurement.level < measurement.min_level:
        return False
    if measurement.max_level is not None and measurement.level > measurement.max_level:
        return False
    return True


def level_below_total(measurement: Measurement, context: ValidationContext) -> bool:
    """Level does not exceed the waterbody-wide cap."""
    if context.max_level_total is None:
        return True
    return measurement.level <= context.max_level_total


PREDICATES: Dict[str, Predicate] = {
    "cloud_coverage": cloud_coverage_ok,
    "level_within_bounds": level_within_bounds,
    "level_below_total": level_below_total,
}

DEFAULT_ENABLED = frozenset({"cloud_coverage"})


@dataclass(frozen=True)
class MeasurementValidator:
    """
    Filters and orders raw measurements.

    ``enabled`` names the predicates from ``PREDICATES`` that a measurement
    must satisfy. Output is sorted ascending by date (stable, so same-day
    records keep their received order) and is not deduplicated.

    Examples:
        >>> validator = MeasurementValidator()
        >>> strict = validator.with_predicates("level_within_bounds", "level_below_total")
    """

    enabled: frozenset = field(default=DEFAULT_ENABLED)
    max_cloud_coverage: float = DEFAULT_MAX_CLOUD_COVERAGE

    def __post_init__(self) -> None:
        unknown = set(self.enabled) - set(PREDICATES)
        if unknown:
            raise ValueError(f"Unknown measurement predicates: {sorted(unknown)}")

    @property
    def predicates(self) -> Tuple[Predicate, ...]:
        return tuple(PREDICATES[name] for name in sorted(self.enabled))

    def with_predicates(self, *names: str) -> "MeasurementValidator":
        """Return a validator with additional predicates enabled."""
        return MeasurementValidator(
            enabled=frozenset(self.enabled) | frozenset(names),
            max_cloud_coverage=self.max_cloud_coverage,
        )

    def without_predicates(self, *names: str) -> "MeasurementValidator":
        return MeasurementValidator(
            enabled=frozenset(self.enabled) - frozenset(names),
            max_cloud_coverage=self.max_cloud_coverage,
        )

    def is_valid(
        self, measurement: Measurement, max_level_total: Optional[float] = None
    ) -> bool:
        context = ValidationContext(self.max_cloud_coverage, max_level_total)
        return all(predicate(measurement, context) for predicate in self.predicates)

    def validate(
        self,
        raw: Iterable[Measurement],
        max_level_total: Optional[float] = None,
    ) -> List[Measurement]:
        """
        Keep the measurements passing every enabled predicate, sorted by date.

        An empty result is returned as-is; callers treat it as an error.
        """
        context = ValidationContext(self.max_cloud_coverage, max_level_total)
        predicates = self.predicates
        raw = list(raw)
        valid = [m for m in raw if all(p(m, context) for p in predicates)]
        valid.sort(key=lambda m: m.date)

        logger.debug(f"Validated measurements: {len(valid)} of {len(raw)} kept")
        return valid


def validate(
    raw: Iterable[Measurement], max_level_total: Optional[float] = None
) -> List[Measurement]:
    """Validate with the default policy (cloud coverage only)."""
    return MeasurementValidator().validate(raw, max_level_total)


def dedupe_by_date(measurements: Sequence[Measurement]) -> List[Measurement]:
    """
    Collapse same-day measurements of a date-sorted sequence.

    The record with the lowest cloud coverage wins; ties keep the first one
    received.
    """
    best: Dict[date, Measurement] = {}
    for measurement in measurements:
        current = best.get(measurement.date)
        if current is None or measurement.cloud_coverage < current.cloud_coverage:
            best[measurement.date] = measurement

    if len(best) != len(measurements):
        logger.debug(
            f"Collapsed {len(measurements) - len(best)} same-day measurement(s)"
        )
    return sorted(best.values(), key=lambda m: m.date)

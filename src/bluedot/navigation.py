"""
Previous/next lookups over a date-sorted measurement sequence.

Comparisons are strict, so a lookup never returns a measurement dated on
the input date itself, even when several records share that date.
"""

from datetime import date
from typing import Optional, Sequence

from .models import Measurement


def prev_measurement(
    measurements: Sequence[Measurement], current: date
) -> Optional[Measurement]:
    """The measurement with the greatest date strictly before ``current``."""
    for measurement in reversed(measurements):
        if measurement.date < current:
            return measurement
    return None


def next_measurement(
    measurements: Sequence[Measurement], current: date
) -> Optional[Measurement]:
    """The measurement with the smallest date strictly after ``current``."""
    for measurement in measurements:
        if measurement.date > current:
            return measurement
    return None


def has_prev(measurements: Sequence[Measurement], current: date) -> bool:
    return prev_measurement(measurements, current) is not None


def has_next(measurements: Sequence[Measurement], current: date) -> bool:
    return next_measurement(measurements, current) is not None


def prev_date(measurements: Sequence[Measurement], current: date) -> Optional[date]:
    found = prev_measurement(measurements, current)
    return found.date if found else None


def next_date(measurements: Sequence[Measurement], current: date) -> Optional[date]:
    found = next_measurement(measurements, current)
    return found.date if found else None

"""Actual-vs-target progress series for charting."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .calculations import DAYS_IN_YEAR
from .dates import SECONDS_PER_DAY, Moment, parse_timestamp, utc_now
from .entry import MileageEntry
from .errors import InvalidInputError
from .settings import AppSettings


@dataclass
class ProgressPoint:
    """One point of the progress chart."""

    moment: datetime
    actual_km: int
    target_km: int

    @property
    def label(self) -> str:
        return f"{self.moment.day}/{self.moment.month}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_progress_chart(
    entries: List[MileageEntry],
    settings: AppSettings,
    now: Optional[Moment] = None,
    point_count: int = 10,
) -> List[ProgressPoint]:
    """
    Evenly spaced points from the period start to ``now``.

    Both series start from the initial odometer reading. The target grows
    linearly over 365 days and stops at the yearly limit; the actual value
    is the latest reading taken at or before each point.
    """
    if point_count < 2:
        raise InvalidInputError("point_count must be >= 2")

    now = parse_timestamp(now) if now is not None else utc_now()
    start = settings.period_start
    span = now - start
    initial_km = settings.initial_kilometers or 0
    ordered = sorted(entries, key=lambda e: e.timestamp)

    points = []
    for i in range(point_count):
        moment = start + span * (i / (point_count - 1))

        days_passed = max(0, (moment - start).total_seconds() / SECONDS_PER_DAY)
        ratio = min(1, days_passed / DAYS_IN_YEAR)
        target = _round_half_up(initial_km + ratio * settings.yearly_limit)

        actual = initial_km
        for entry in ordered:
            if entry.timestamp <= moment:
                actual = entry.total_kilometers
            else:
                break

        points.append(ProgressPoint(moment=moment, actual_km=actual, target_km=target))

    return points

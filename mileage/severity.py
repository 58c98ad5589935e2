"""Severity enum for color-banding derived metrics."""

from enum import Enum


class Severity(Enum):
    """Five-level severity scale. Lower value = better."""

    EXCELLENT = 1
    GOOD = 2
    NEUTRAL = 3
    WARNING = 4
    DANGER = 5
    NO_DATA = 6  # Nothing to judge yet (e.g. zero daily average)


class MetricKind(Enum):
    """Metrics banded by ``get_color_for_value``."""

    VARIANCE = "variance"
    TOTAL = "total"
    PROJECTED = "projected"
    REMAINING = "remaining"

"""Severity banding for derived metrics."""

from typing import Union

from .settings import YEARLY_LIMIT
from .severity import MetricKind, Severity

SEVERITY_COLORS = {
    Severity.EXCELLENT: "#00E676",
    Severity.GOOD: "#66BB6A",
    Severity.NEUTRAL: "#FFA726",
    Severity.WARNING: "#FF7043",
    Severity.DANGER: "#FF5252",
    Severity.NO_DATA: "#999999",
}


def _band_ascending(value: float, ladder) -> Severity:
    """Band a value where lower is better: first breakpoint it is under wins."""
    for limit, severity in zip(ladder, (
        Severity.EXCELLENT, Severity.GOOD, Severity.NEUTRAL, Severity.WARNING
    )):
        if value < limit:
            return severity
    return Severity.DANGER


def get_color_for_value(
    value: float,
    kind: Union[MetricKind, str],
    yearly_limit: int = YEARLY_LIMIT,
) -> Severity:
    """
    Map a metric to a severity tier.

    - variance: absolute km offsets from today's target
    - total: percent of the yearly limit driven so far
    - projected: projected year-end total against the limit
    - remaining: percent of the limit still available (higher is better)
    """
    kind = MetricKind(kind)

    if kind == MetricKind.VARIANCE:
        # Negative = under pace (good), positive = over pace (bad)
        return _band_ascending(value, (-100, 0, 50, 100))

    if kind == MetricKind.TOTAL:
        percent = (value / yearly_limit) * 100
        return _band_ascending(percent, (70, 85, 95, 100))

    if kind == MetricKind.PROJECTED:
        return _band_ascending(
            value,
            (yearly_limit * 0.9, yearly_limit * 0.95, yearly_limit, yearly_limit * 1.05),
        )

    remain_percent = (value / yearly_limit) * 100
    if remain_percent > 40:
        return Severity.EXCELLENT
    if remain_percent > 25:
        return Severity.GOOD
    if remain_percent > 15:
        return Severity.NEUTRAL
    if remain_percent > 5:
        return Severity.WARNING
    return Severity.DANGER


def get_color_for_daily_average(
    avg: float, days_passed_ratio: float, yearly_limit: int = YEARLY_LIMIT
) -> Severity:
    """
    Band the daily average against the daily share of the limit.

    Early in the period the target is relaxed by up to 10%. A zero average
    means there is nothing to judge yet, so it is not reported as good.
    """
    if avg == 0:
        return Severity.NO_DATA

    target_daily = yearly_limit / 365
    adjusted_target = target_daily * (1 + (1 - days_passed_ratio) * 0.1)

    return _band_ascending(avg / adjusted_target, (0.85, 0.95, 1.05, 1.15))


def severity_hex(severity: Severity) -> str:
    """Hex color used to present a severity tier."""
    return SEVERITY_COLORS[severity]

"""Dashboard dataclass bundling every derived metric for one instant."""

from dataclasses import dataclass
from typing import List, Optional

from .calculations import (
    get_current_year_data,
    get_daily_average,
    get_days_passed_ratio,
    get_projected_total,
    get_remaining_days,
    get_remaining_kilometers,
    get_required_daily_average,
    get_target_for_today,
    get_total_kilometers,
)
from .colors import get_color_for_daily_average, get_color_for_value
from .dates import Moment, parse_timestamp, utc_now
from .settings import AppSettings
from .severity import MetricKind, Severity
from .yearly_data import YearlyData


@dataclass
class Dashboard:
    """Calculated progress toward the yearly limit."""

    year_data: Optional[YearlyData]
    yearly_limit: int
    total_km: int
    target_km: float
    variance: float
    remaining_km: int
    remaining_days: int
    daily_average: float
    projected_total: float
    required_daily_average: float
    days_passed_ratio: float
    variance_severity: Severity
    total_severity: Severity
    projected_severity: Severity
    remaining_severity: Severity
    daily_average_severity: Severity

    @property
    def progress_percent(self) -> float:
        return self.total_km / self.yearly_limit * 100

    @property
    def entry_count(self) -> int:
        return len(self.year_data.entries) if self.year_data else 0

    @property
    def is_over_limit(self) -> bool:
        return self.remaining_km < 0


def build_dashboard(
    data: List[YearlyData], settings: AppSettings, now: Optional[Moment] = None
) -> Dashboard:
    """Compute every metric for the current calendar year's bucket."""
    now = parse_timestamp(now) if now is not None else utc_now()
    limit = settings.yearly_limit
    year_data = get_current_year_data(data, now)

    total_km = get_total_kilometers(year_data)
    target_km = get_target_for_today(settings, now)
    variance = total_km - target_km
    remaining_km = get_remaining_kilometers(year_data, limit)
    daily_average = get_daily_average(year_data)
    projected_total = get_projected_total(year_data, settings, now)
    days_passed_ratio = get_days_passed_ratio(settings, now)

    return Dashboard(
        year_data=year_data,
        yearly_limit=limit,
        total_km=total_km,
        target_km=target_km,
        variance=variance,
        remaining_km=remaining_km,
        remaining_days=get_remaining_days(settings, now),
        daily_average=daily_average,
        projected_total=projected_total,
        required_daily_average=get_required_daily_average(year_data, settings, now),
        days_passed_ratio=days_passed_ratio,
        variance_severity=get_color_for_value(variance, MetricKind.VARIANCE, limit),
        total_severity=get_color_for_value(total_km, MetricKind.TOTAL, limit),
        projected_severity=get_color_for_value(projected_total, MetricKind.PROJECTED, limit),
        remaining_severity=get_color_for_value(remaining_km, MetricKind.REMAINING, limit),
        daily_average_severity=get_color_for_daily_average(
            daily_average, days_passed_ratio, limit
        ),
    )

"""Pace and projection calculations.

Every function here is pure: it works on data already loaded into memory
and takes the current instant as an optional ``now`` argument. A missing
bucket or an empty one yields 0, never an exception.

Two definitions of pace are in use and must stay separate:

- ``get_projected_total`` extrapolates the rate observed since the start
  of the rolling period (total / elapsed days).
- ``get_daily_average`` uses only the first and last readings of the
  bucket (distance between them / days between them).
"""

from typing import List, Optional

from .dates import Moment, days_between, parse_timestamp, utc_now
from .settings import YEARLY_LIMIT, AppSettings
from .yearly_data import YearlyData

DAYS_IN_YEAR = 365


def _now(now: Optional[Moment]):
    return parse_timestamp(now) if now is not None else utc_now()


def get_current_year_data(
    data: List[YearlyData], now: Optional[Moment] = None
) -> Optional[YearlyData]:
    """Find the bucket for the calendar year containing ``now``."""
    current_year = _now(now).year
    for year_data in data:
        if year_data.year == current_year:
            return year_data
    return None


def get_total_kilometers(year_data: Optional[YearlyData]) -> int:
    """
    Current odometer total for a bucket.

    Readings are cumulative, so the highest one is the total. This also
    shrugs off a single reading entered out of order.
    """
    if year_data is None or not year_data.entries:
        return 0
    return max(e.total_kilometers for e in year_data.entries)


def get_latest_reading(data: List[YearlyData], now: Optional[Moment] = None) -> int:
    """Most recent reading by date in the current calendar year, or 0."""
    year_data = get_current_year_data(data, now)
    if year_data is None or year_data.latest_entry is None:
        return 0
    return year_data.latest_entry.total_kilometers


def get_daily_target(yearly_limit: int = YEARLY_LIMIT) -> float:
    return yearly_limit / DAYS_IN_YEAR


def get_target_for_date(moment: Moment, settings: AppSettings) -> float:
    """
    Distance that should have been driven by ``moment`` on a linear pace.

    The start day counts as day 1, so on the start date itself the target
    is one day's share rather than 0.
    """
    moment = parse_timestamp(moment)
    start = settings.period_start
    end = settings.period_end

    if moment < start:
        return 0
    if moment > end:
        return settings.yearly_limit

    total_days = days_between(start, end)
    days_passed = days_between(start, moment) + 1
    return (settings.yearly_limit * days_passed) / total_days


def get_target_for_today(settings: AppSettings, now: Optional[Moment] = None) -> float:
    return get_target_for_date(_now(now), settings)


def get_variance_from_target(
    year_data: Optional[YearlyData],
    settings: AppSettings,
    now: Optional[Moment] = None,
) -> float:
    """
    Actual total minus today's target.

    Positive = driven more than the linear pace allows (over budget).
    Negative = under pace, room to spare.
    """
    return get_total_kilometers(year_data) - get_target_for_today(settings, now)


def get_remaining_kilometers(
    year_data: Optional[YearlyData], yearly_limit: int = YEARLY_LIMIT
) -> int:
    """Distance left in the allowance. Negative once the limit is exceeded."""
    return yearly_limit - get_total_kilometers(year_data)


def get_remaining_days(settings: AppSettings, now: Optional[Moment] = None) -> int:
    """Whole days left in the rolling period, never negative."""
    return max(0, days_between(_now(now), settings.period_end))


def get_daily_average(year_data: Optional[YearlyData]) -> float:
    """
    Average km/day between the first and last readings of the bucket.

    Intermediate readings are ignored. Returns 0 with fewer than two
    entries or when the endpoints are less than a day apart.
    """
    if year_data is None or len(year_data.entries) < 2:
        return 0

    ordered = year_data.get_entries_sorted()
    first = ordered[0]
    last = ordered[-1]
    days = days_between(first.timestamp, last.timestamp)

    if days == 0:
        return 0

    return (last.total_kilometers - first.total_kilometers) / days


def get_projected_total(
    year_data: Optional[YearlyData],
    settings: AppSettings,
    now: Optional[Moment] = None,
) -> float:
    """Year-end total if the pace since the period start continues."""
    if year_data is None or not year_data.entries:
        return 0

    now = _now(now)
    start = settings.period_start
    if now < start:
        return 0

    total = get_total_kilometers(year_data)
    days_passed = days_between(start, now) + 1
    total_days = days_between(start, settings.period_end)
    return (total / days_passed) * total_days


def get_required_daily_average(
    year_data: Optional[YearlyData],
    settings: AppSettings,
    now: Optional[Moment] = None,
) -> float:
    """
    Km/day that would use up exactly the remaining allowance by period end.

    Returns 0 when the allowance is already used up or the period is over.
    """
    remaining_km = get_remaining_kilometers(year_data, settings.yearly_limit)
    remaining_days = get_remaining_days(settings, now)

    if remaining_days <= 0 or remaining_km <= 0:
        return 0

    return remaining_km / remaining_days


def get_days_passed_ratio(settings: AppSettings, now: Optional[Moment] = None) -> float:
    """Fraction of a 365-day year elapsed since the period start."""
    return days_between(settings.period_start, _now(now)) / DAYS_IN_YEAR

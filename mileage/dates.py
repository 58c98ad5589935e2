"""Timestamp parsing and day arithmetic.

All instants are handled as naive UTC datetimes. Aware values are
converted to UTC; naive values are taken as UTC already.
"""

from datetime import date, datetime, time, timezone
from typing import Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 86400

Moment = Union[datetime, date, str]


def utc_now() -> datetime:
    """Current instant as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Moment) -> datetime:
    """Convert an ISO string, date or datetime into a naive UTC datetime."""
    if isinstance(value, str):
        value = isoparse(value)
    if not isinstance(value, datetime):
        return datetime.combine(value, time())
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_timestamp(value: Moment) -> str:
    """Format an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return parse_timestamp(value).isoformat(timespec="milliseconds") + "Z"


def days_between(start: Moment, end: Moment) -> int:
    """Whole days from start to end, truncated toward zero."""
    delta = parse_timestamp(end) - parse_timestamp(start)
    return int(delta.total_seconds() / SECONDS_PER_DAY)


def add_years(value: Moment, years: int = 1) -> datetime:
    """Shift an instant by whole years (Feb 29 clamps to Feb 28)."""
    return parse_timestamp(value) + relativedelta(years=years)


def start_of_year(year: int) -> datetime:
    return datetime(year, 1, 1)

"""MileageEntry class for odometer readings."""

import time
from datetime import datetime
from typing import Optional

from .dates import Moment, format_timestamp, parse_timestamp, utc_now


_last_id = 0


def new_entry_id() -> str:
    """Generate a time-based opaque entry id, increasing within a process."""
    global _last_id
    _last_id = max(time.time_ns(), _last_id + 1)
    return str(_last_id)


class MileageEntry:
    """A cumulative odometer reading taken at a point in time."""

    def __init__(
            self,
            id: str,
            date: str,
            total_kilometers: int,
            note: Optional[str] = None,
    ):
        self.id = id
        self.date = date
        self.total_kilometers = total_kilometers
        self.note = note

    @classmethod
    def create(
            cls,
            total_kilometers: int,
            note: Optional[str] = None,
            date: Optional[Moment] = None,
    ) -> "MileageEntry":
        """Build a new entry with a fresh id, dated now unless given."""
        return cls(
            new_entry_id(),
            format_timestamp(date if date is not None else utc_now()),
            total_kilometers,
            note or None,
        )

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.date)

    @property
    def year(self) -> int:
        """Calendar year that decides the entry's bucket."""
        return self.timestamp.year

    def __repr__(self) -> str:
        return (
            f"MileageEntry(id={self.id!r}, date={self.date!r}, "
            f"total_kilometers={self.total_kilometers!r})"
        )

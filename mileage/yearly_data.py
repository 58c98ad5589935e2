"""YearlyData class - one calendar-year bucket of mileage entries."""

from typing import List, Optional

from .dates import format_timestamp, start_of_year
from .entry import MileageEntry


class YearlyData:
    """Entries recorded during one calendar year."""

    def __init__(
        self,
        year: int,
        start_date: Optional[str] = None,
        entries: Optional[List[MileageEntry]] = None,
    ):
        self.year = year
        self.start_date = start_date or format_timestamp(start_of_year(year))
        self.entries = entries or []

    def sort_entries(self) -> None:
        """Keep entries ascending by date so first/last lookups are right."""
        self.entries.sort(key=lambda e: e.timestamp)

    def find_entry(self, entry_id: str) -> Optional[MileageEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def remove_entry(self, entry_id: str) -> Optional[MileageEntry]:
        """Remove and return the entry with the given id, if present."""
        entry = self.find_entry(entry_id)
        if entry is not None:
            self.entries.remove(entry)
        return entry

    @property
    def first_entry(self) -> Optional[MileageEntry]:
        if not self.entries:
            return None
        return min(self.entries, key=lambda e: e.timestamp)

    @property
    def latest_entry(self) -> Optional[MileageEntry]:
        """Most recent entry by date (not the highest reading)."""
        if not self.entries:
            return None
        return max(self.entries, key=lambda e: e.timestamp)

    def get_entries_sorted(self, reverse: bool = False) -> List[MileageEntry]:
        return sorted(self.entries, key=lambda e: e.timestamp, reverse=reverse)

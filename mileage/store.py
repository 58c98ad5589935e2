"""Entry Store: yearly-bucketed entries, settings and config on a key-value backend."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jsonschema import ValidationError, validate
from loguru import logger

from .calculations import get_latest_reading
from .dates import Moment, format_timestamp
from .entry import MileageEntry
from .errors import InvalidInputError, StorageError
from .settings import AppConfig, AppSettings, default_settings, merge_settings
from .yearly_data import YearlyData

STORAGE_KEY = "mileage_data"
SETTINGS_KEY = "app_settings"
CONFIG_KEY = "app_config"

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"

EDITABLE_FIELDS = ("date", "total_kilometers", "note")

# Anything that makes a persisted record unusable; reads fall back to defaults.
LOAD_ERRORS = (StorageError, ValidationError, ValueError, TypeError, KeyError)


@lru_cache(maxsize=None)
def load_schema() -> Dict[str, Any]:
    """Load the JSON schema for the store file."""
    with open(SCHEMA_PATH) as f:
        return yaml.safe_load(f)


def record_schema(name: str) -> Dict[str, Any]:
    """Schema for a single record, resolved against the shared definitions."""
    schema = load_schema()
    return {"$defs": schema["$defs"], "$ref": f"#/$defs/{name}"}


def _parse_object(dct: Dict[str, Any]) -> Union[MileageEntry, YearlyData, dict]:
    """Parse dictionary into appropriate object type."""
    if "totalKilometers" in dct:
        return MileageEntry(
            dct["id"],
            dct["date"],
            dct["totalKilometers"],
            dct.get("note"),
        )
    elif "year" in dct and "entries" in dct:
        return YearlyData(dct["year"], dct.get("startDate"), dct["entries"])
    return dct


def _entry_to_dict(entry: MileageEntry) -> Dict[str, Any]:
    """Serialize a MileageEntry to the stored dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": entry.id,
        "date": entry.date,
        "totalKilometers": entry.total_kilometers,
    }
    if entry.note is not None:
        d["note"] = entry.note
    return d


def _year_to_dict(year_data: YearlyData) -> Dict[str, Any]:
    return {
        "year": year_data.year,
        "startDate": year_data.start_date,
        "entries": [_entry_to_dict(e) for e in year_data.entries],
    }


def _get_or_create_bucket(data: List[YearlyData], year: int) -> YearlyData:
    for year_data in data:
        if year_data.year == year:
            return year_data
    year_data = YearlyData(year)
    data.append(year_data)
    return year_data


class EntryStore:
    """
    Reads and writes the tracker's records through a key-value backend.

    Reads never raise for missing or malformed data: the problem is logged
    and a default is returned. Writes report success as a bool.
    """

    def __init__(self, backend):
        self.backend = backend

    # -------------------------------------------------------------------------
    # Yearly entries
    # -------------------------------------------------------------------------

    def load_data(self) -> List[YearlyData]:
        """Load every yearly bucket, entries sorted ascending by date."""
        try:
            raw = self.backend.get_item(STORAGE_KEY)
            if raw is None:
                return []
            validate(instance=raw, schema=record_schema("yearlyDataList"))
            data = json.loads(json.dumps(raw), object_hook=_parse_object)
            for year_data in data:
                year_data.sort_entries()
            return data
        except LOAD_ERRORS as e:
            logger.error(f"Error loading data: {e}")
            return []

    def save_data(self, data: List[YearlyData]) -> bool:
        try:
            self.backend.set_item(STORAGE_KEY, [_year_to_dict(y) for y in data])
        except StorageError as e:
            logger.error(f"Error saving data: {e}")
            return False
        return True

    def add_entry(self, entry: MileageEntry) -> bool:
        """
        Add an entry to the bucket for its calendar year.

        The bucket is created on first use, starting Jan 1 of that year.
        """
        data = self.load_data()
        year_data = _get_or_create_bucket(data, entry.year)
        year_data.entries.append(entry)
        year_data.sort_entries()
        logger.debug(f"Adding entry {entry.id} to {year_data.year}")
        return self.save_data(data)

    def update_entry(self, entry_id: str, changes: Dict[str, Any]) -> bool:
        """
        Merge changes into an existing entry.

        The entry is looked up by id in every bucket. If its date moves to
        another calendar year it is moved to that year's bucket. Returns
        False without saving when no entry has the id.
        """
        if "id" in changes:
            raise InvalidInputError("Entry id cannot be changed")
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown entry fields: {', '.join(sorted(unknown))}")
        if "date" in changes:
            try:
                new_date = format_timestamp(changes["date"])
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"Invalid date: {changes['date']!r}") from e
        if "total_kilometers" in changes:
            km = changes["total_kilometers"]
            if isinstance(km, bool) or not isinstance(km, int) or km < 0:
                raise InvalidInputError("total kilometers must be a non-negative whole number")

        data = self.load_data()
        for year_data in data:
            entry = year_data.find_entry(entry_id)
            if entry is not None:
                break
        else:
            logger.debug(f"No entry with id {entry_id} to update")
            return False

        if "date" in changes:
            entry.date = new_date
        if "total_kilometers" in changes:
            entry.total_kilometers = changes["total_kilometers"]
        if "note" in changes:
            entry.note = changes["note"] or None

        if entry.year != year_data.year:
            logger.debug(f"Moving entry {entry_id} from {year_data.year} to {entry.year}")
            year_data.remove_entry(entry_id)
            year_data = _get_or_create_bucket(data, entry.year)
            year_data.entries.append(entry)

        year_data.sort_entries()
        return self.save_data(data)

    def delete_entry(self, entry_id: str) -> bool:
        """Remove the first entry with the given id. Saves only on a match."""
        data = self.load_data()
        for year_data in data:
            if year_data.remove_entry(entry_id) is not None:
                logger.debug(f"Deleting entry {entry_id} from {year_data.year}")
                return self.save_data(data)
        return False

    def find_entry(self, entry_id: str) -> Optional[MileageEntry]:
        for year_data in self.load_data():
            entry = year_data.find_entry(entry_id)
            if entry is not None:
                return entry
        return None

    def get_latest_reading(self, now: Optional[Moment] = None) -> int:
        """Latest reading by date in the current calendar year, or 0."""
        return get_latest_reading(self.load_data(), now)

    # -------------------------------------------------------------------------
    # Settings and legacy config
    # -------------------------------------------------------------------------

    def load_settings(self, now: Optional[Moment] = None) -> AppSettings:
        """Persisted settings merged over the defaults."""
        try:
            raw = self.backend.get_item(SETTINGS_KEY)
            if raw is None:
                return default_settings(now)
            validate(instance=raw, schema=record_schema("settings"))
            return merge_settings(raw, now)
        except LOAD_ERRORS as e:
            logger.error(f"Error loading settings: {e}")
            return default_settings(now)

    def save_settings(self, settings: AppSettings) -> bool:
        try:
            self.backend.set_item(SETTINGS_KEY, settings.to_dict())
        except StorageError as e:
            logger.error(f"Error saving settings: {e}")
            return False
        return True

    def load_config(self) -> Optional[AppConfig]:
        try:
            raw = self.backend.get_item(CONFIG_KEY)
            if raw is None:
                return None
            validate(instance=raw, schema=record_schema("config"))
            return AppConfig.from_dict(raw)
        except LOAD_ERRORS as e:
            logger.error(f"Error loading config: {e}")
            return None

    def save_config(self, config: AppConfig) -> bool:
        try:
            self.backend.set_item(CONFIG_KEY, config.to_dict())
        except StorageError as e:
            logger.error(f"Error saving config: {e}")
            return False
        return True

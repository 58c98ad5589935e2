#!/usr/bin/env python3
"""Tests for the tracker CLI."""

import pytest
import yaml

import tracker
from mileage import EntryStore, MileageEntry, Severity, YamlFileStore
from mileage.dates import utc_now
from tracker import (
    format_date,
    format_km,
    format_pace,
    format_severity,
    format_signed_km,
    main,
    make_history_table,
    truncate,
)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep main() from replacing the loguru handlers."""
    monkeypatch.setattr(tracker, "configure_logging", lambda verbose=False: None)


@pytest.fixture
def store(store_file):
    return EntryStore(YamlFileStore(store_file))


def this_year(month_day):
    return f"{utc_now().year}-{month_day}"


# =============================================================================
# Formatting helpers
# =============================================================================


class TestFormatKm:
    """Tests for format_km and format_signed_km."""

    def test_formats_number(self):
        assert format_km(42000) == "42,000"
        assert format_km(0) == "0"
        assert format_km(1234.4) == "1,234"

    def test_none_returns_dash(self):
        assert format_km(None) == "-"

    def test_signed(self):
        assert format_signed_km(1000) == "+1,000"
        assert format_signed_km(-250) == "-250"
        assert format_signed_km(0.2) == "0"


class TestOtherFormatters:
    """Tests for pace, date and severity formatting."""

    def test_pace(self):
        assert format_pace(27.397) == "27.4 km/day"

    def test_date(self):
        assert format_date("2025-03-01T08:30:00.000Z") == "2025-03-01 08:30"

    def test_severity(self):
        assert format_severity(Severity.WARNING) == "WARNING"
        assert format_severity(Severity.NO_DATA) == "-"


class TestTruncate:
    """Tests for truncate."""

    def test_none_returns_dash(self):
        assert truncate(None) == "-"

    def test_short_text_unchanged(self):
        assert truncate("short") == "short"

    def test_long_text_truncated_with_ellipsis(self):
        result = truncate("a" * 50, max_len=20)
        assert len(result) == 20
        assert result.endswith("...")


class TestMakeHistoryTable:
    """Tests for make_history_table."""

    def test_empty(self):
        assert make_history_table([]) == []

    def test_driven_since_previous(self):
        entries = [
            MileageEntry("a", "2025-03-01T00:00:00.000Z", 42000),
            MileageEntry("b", "2025-03-10T00:00:00.000Z", 43250, "after road trip"),
        ]
        rows = make_history_table(entries)
        assert rows[0] == ["a", "2025-03-01 00:00", "42,000", "-", "-"]
        assert rows[1] == ["b", "2025-03-10 00:00", "43,250", "1,250", "after road trip"]


# =============================================================================
# Commands
# =============================================================================


class TestLogCommand:
    """Tests for the log command."""

    def test_adds_entry(self, store_file, store, capsys):
        assert main([str(store_file), "log", "42000", "--date", "2025-03-01", "--note", "start"]) == 0
        assert "Entry saved." in capsys.readouterr().out

        entries = store.load_data()[0].entries
        assert len(entries) == 1
        assert entries[0].total_kilometers == 42000
        assert entries[0].date == "2025-03-01T00:00:00.000Z"
        assert entries[0].note == "start"

    def test_dry_run_writes_nothing(self, store_file, capsys):
        assert main([str(store_file), "log", "42000", "--dry-run"]) == 0
        assert "dry run" in capsys.readouterr().out
        assert not store_file.exists()

    def test_invalid_kilometers(self, store_file, capsys):
        assert main([str(store_file), "log", "lots"]) == 1
        assert "Please enter a valid total distance" in capsys.readouterr().out
        assert not store_file.exists()

    def test_lower_reading_needs_force(self, store_file, store, capsys):
        store.add_entry(MileageEntry("a", this_year("01-02T00:00:00Z"), 5000))

        assert main([str(store_file), "log", "4000", "--date", this_year("01-03")]) == 1
        assert "--force" in capsys.readouterr().out
        assert len(store.load_data()[0].entries) == 1

        assert main([str(store_file), "log", "4000", "--date", this_year("01-03"), "--force"]) == 0
        assert len(store.load_data()[0].entries) == 2


class TestHistoryCommand:
    """Tests for the history command."""

    def test_lists_readings_newest_first(self, store_file, store, capsys):
        store.add_entry(MileageEntry("first-id", "2025-03-01T00:00:00.000Z", 42000))
        store.add_entry(MileageEntry("second-id", "2025-03-10T00:00:00.000Z", 43250))

        assert main([str(store_file), "history", "--year", "2025"]) == 0
        out = capsys.readouterr().out
        assert "Readings: 2" in out
        assert out.index("second-id") < out.index("first-id")

    def test_ascending(self, store_file, store, capsys):
        store.add_entry(MileageEntry("first-id", "2025-03-01T00:00:00.000Z", 42000))
        store.add_entry(MileageEntry("second-id", "2025-03-10T00:00:00.000Z", 43250))

        assert main([str(store_file), "history", "--year", "2025", "--asc"]) == 0
        out = capsys.readouterr().out
        assert out.index("first-id") < out.index("second-id")

    def test_empty_year(self, store_file, capsys):
        assert main([str(store_file), "history", "--year", "2019"]) == 0
        assert "No readings found." in capsys.readouterr().out


class TestEditDeleteCommands:
    """Tests for the edit and delete commands."""

    @pytest.fixture(autouse=True)
    def seeded(self, store):
        store.add_entry(MileageEntry("r1", "2025-03-01T00:00:00.000Z", 42000))

    def test_edit(self, store_file, store, capsys):
        assert main([str(store_file), "edit", "r1", "--km", "42100", "--note", "typo"]) == 0
        assert "Entry updated." in capsys.readouterr().out
        entry = store.find_entry("r1")
        assert entry.total_kilometers == 42100
        assert entry.note == "typo"

    def test_edit_unknown_id(self, store_file, capsys):
        assert main([str(store_file), "edit", "nope", "--km", "1"]) == 1
        assert "No reading with id 'nope'" in capsys.readouterr().out

    def test_edit_nothing_to_change(self, store_file, capsys):
        assert main([str(store_file), "edit", "r1"]) == 1
        assert "Nothing to change" in capsys.readouterr().out

    def test_delete(self, store_file, store, capsys):
        assert main([str(store_file), "delete", "r1"]) == 0
        assert "Entry deleted." in capsys.readouterr().out
        assert store.find_entry("r1") is None

    def test_delete_unknown_id(self, store_file, capsys):
        assert main([str(store_file), "delete", "nope"]) == 1


class TestSettingsCommands:
    """Tests for settings, setup and reset."""

    def test_show_defaults(self, store_file, capsys):
        assert main([str(store_file), "settings"]) == 0
        out = capsys.readouterr().out
        assert "10,000 km" in out
        assert "#CC0000" in out

    def test_update(self, store_file, store, capsys):
        assert main([str(store_file), "settings", "--limit", "12000", "--language", "EN"]) == 0
        assert "Settings updated." in capsys.readouterr().out
        settings = store.load_settings()
        assert settings.yearly_limit == 12000
        assert settings.language == "en"

    def test_invalid_update(self, store_file, capsys):
        assert main([str(store_file), "settings", "--color", "red"]) == 1
        assert capsys.readouterr().out.startswith("Error:")
        assert not store_file.exists()

    def test_setup(self, store_file, capsys):
        assert main([str(store_file), "setup", "2025-03-01", "--initial-km", "42000"]) == 0
        assert "Setup complete." in capsys.readouterr().out
        with open(store_file) as fp:
            raw = yaml.safe_load(fp)
        assert raw["app_settings"]["startDate"] == "2025-03-01T00:00:00.000Z"
        assert raw["app_settings"]["initialKilometers"] == 42000
        assert raw["app_config"] == {
            "startDate": "2025-03-01T00:00:00.000Z",
            "initialKilometers": 42000,
        }

    def test_reset_requires_confirmation(self, store_file, capsys):
        assert main([str(store_file), "reset"]) == 1
        assert "--yes" in capsys.readouterr().out

    def test_reset(self, store_file, store):
        main([str(store_file), "settings", "--limit", "12000"])
        assert main([str(store_file), "reset", "--yes"]) == 0
        assert store.load_settings().yearly_limit == 10000


class TestReportCommands:
    """Tests for status and progress."""

    def test_status(self, store_file, capsys):
        assert main([str(store_file), "status"]) == 0
        out = capsys.readouterr().out
        assert "Yearly limit: 10,000 km" in out
        assert "Readings this year: 0" in out
        assert "Variance" in out

    def test_progress(self, store_file, capsys):
        main([str(store_file), "setup", this_year("01-01")])
        capsys.readouterr()
        assert main([str(store_file), "progress", "--points", "3"]) == 0
        out = capsys.readouterr().out
        assert "Actual" in out
        assert "Target" in out

    def test_progress_too_few_points(self, store_file, capsys):
        assert main([str(store_file), "progress", "--points", "1"]) == 1
        assert "Error:" in capsys.readouterr().out


class TestUnsavedChanges:
    """Writes that fail exit 1 and point at the store validator."""

    CORRUPT = "mileage_data: [unclosed\n"

    def test_log_on_corrupt_store(self, store_file, capsys):
        store_file.write_text(self.CORRUPT)
        assert main([str(store_file), "log", "42000"]) == 1
        out = capsys.readouterr().out
        assert "Error: Could not save the reading." in out
        assert f"validate-mileage-store {store_file}" in out
        assert store_file.read_text() == self.CORRUPT

    def test_settings_on_corrupt_store(self, store_file, capsys):
        store_file.write_text(self.CORRUPT)
        assert main([str(store_file), "settings", "--limit", "12000"]) == 1
        out = capsys.readouterr().out
        assert "Settings updated." not in out
        assert "Error: Could not save the settings." in out

    def test_setup_on_corrupt_store(self, store_file, capsys):
        store_file.write_text(self.CORRUPT)
        assert main([str(store_file), "setup", "2025-03-01"]) == 1
        assert "Setup complete." not in capsys.readouterr().out

    def test_reset_on_corrupt_store(self, store_file, capsys):
        store_file.write_text(self.CORRUPT)
        assert main([str(store_file), "reset", "--yes"]) == 1
        assert "Settings reset" not in capsys.readouterr().out

    def test_start_date_without_period_end_rejected(self, store_file, capsys):
        assert main([str(store_file), "settings", "--start-date", "9999-06-01"]) == 1
        assert capsys.readouterr().out.startswith("Error:")
        assert not store_file.exists()
        assert main([str(store_file), "status"]) == 0

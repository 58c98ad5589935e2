#!/usr/bin/env python3
"""Tests for the YAML key-value backend."""

import pytest
import yaml

from mileage import YamlFileStore
from mileage.errors import StorageError


class TestYamlFileStore:
    """Tests for YamlFileStore get/set."""

    def test_missing_file_returns_none(self, store_file):
        assert YamlFileStore(store_file).get_item("mileage_data") is None

    def test_set_then_get(self, store_file):
        backend = YamlFileStore(store_file)
        backend.set_item("app_settings", {"yearlyLimit": 12000})
        assert backend.get_item("app_settings") == {"yearlyLimit": 12000}

    def test_set_keeps_other_keys(self, store_file):
        backend = YamlFileStore(store_file)
        backend.set_item("app_settings", {"yearlyLimit": 12000})
        backend.set_item("app_config", {"startDate": "2025-03-01T00:00:00.000Z"})
        assert backend.get_item("app_settings") == {"yearlyLimit": 12000}
        assert backend.get_item("app_config") == {"startDate": "2025-03-01T00:00:00.000Z"}

    def test_timestamps_and_ids_stay_strings(self, store_file):
        """Values that look like dates or numbers are written quoted."""
        backend = YamlFileStore(store_file)
        backend.set_item("x", {"id": "1740823200000", "date": "2025-03-01T00:00:00.000Z"})
        with open(store_file) as fp:
            data = yaml.safe_load(fp)
        assert data["x"] == {"id": "1740823200000", "date": "2025-03-01T00:00:00.000Z"}

    def test_empty_file(self, store_file):
        store_file.write_text("")
        assert YamlFileStore(store_file).get_item("mileage_data") is None

    def test_creates_parent_directory(self, tmp_path):
        backend = YamlFileStore(tmp_path / "nested" / "mileage.yaml")
        backend.set_item("a", 1)
        assert backend.get_item("a") == 1

    def test_corrupt_yaml_raises(self, store_file):
        store_file.write_text("mileage_data: [unclosed\n")
        with pytest.raises(StorageError):
            YamlFileStore(store_file).get_item("mileage_data")

    def test_non_mapping_raises(self, store_file):
        store_file.write_text("- just\n- a list\n")
        with pytest.raises(StorageError):
            YamlFileStore(store_file).get_item("mileage_data")

    def test_failed_write_leaves_file_untouched(self, store_file):
        store_file.write_text("mileage_data: [unclosed\n")
        with pytest.raises(StorageError):
            YamlFileStore(store_file).set_item("app_settings", {"yearlyLimit": 1})
        assert store_file.read_text() == "mileage_data: [unclosed\n"

    def test_no_temp_files_left(self, store_file):
        backend = YamlFileStore(store_file)
        backend.set_item("a", 1)
        backend.set_item("b", 2)
        assert [p.name for p in store_file.parent.iterdir()] == [store_file.name]

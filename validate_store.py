#!/usr/bin/env python3
"""Validate mileage store files against the schema."""
import argparse
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from mileage.dates import parse_timestamp
from mileage.store import load_schema


def _check_timestamps(data: dict) -> list[str]:
    """Schema only checks that dates are strings; make sure they parse."""
    errors = []
    for bucket in data.get("mileage_data") or []:
        for entry in bucket.get("entries") or []:
            try:
                parse_timestamp(entry["date"])
            except ValueError:
                errors.append(f"Invalid date {entry['date']!r} in entry {entry['id']}")
    for key in ("app_settings", "app_config"):
        record = data.get(key) or {}
        if "startDate" in record:
            try:
                parse_timestamp(record["startDate"])
            except ValueError:
                errors.append(f"Invalid startDate {record['startDate']!r} in {key}")
    return errors


def validate_store_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single store file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f) or {}
        validate(instance=data, schema=schema)
        errors.extend(_check_timestamps(data))
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate each store file given on the command line."""
    parser = argparse.ArgumentParser(description="Validate mileage store files")
    parser.add_argument("files", type=Path, nargs="+", help="Store YAML files")
    args = parser.parse_args(argv)

    schema = load_schema()

    all_valid = True
    for filepath in args.files:
        errors = validate_store_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())

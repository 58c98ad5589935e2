"""Durable key-value backend: one YAML mapping on disk."""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .errors import StorageError


class YamlFileStore:
    """
    Get/set-by-key store persisted as a single YAML file.

    Each write replaces the whole file through a temporary file in the same
    directory, so a failed write leaves the previous contents untouched.
    """

    def __init__(self, filename: Union[str, Path]):
        self.filename = Path(filename)

    def _read(self) -> Dict[str, Any]:
        if not self.filename.exists():
            return {}
        try:
            with open(self.filename, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Could not read {self.filename}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageError(f"{self.filename} does not contain a key-value mapping")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        directory = self.filename.parent
        temp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                prefix=self.filename.name + "-",
                suffix=".tmp",
                dir=directory,
                delete=False,
            ) as fp:
                temp_name = fp.name
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
            os.replace(temp_name, self.filename)
        except (OSError, yaml.YAMLError) as e:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise StorageError(f"Could not write {self.filename}: {e}") from e

    def get_item(self, key: str) -> Any:
        """Value stored under key, or None when the key is missing."""
        return self._read().get(key)

    def set_item(self, key: str, value: Any) -> None:
        """Store value under key, keeping the other keys as they are."""
        data = self._read()
        data[key] = value
        self._write(data)

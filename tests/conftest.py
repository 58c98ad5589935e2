"""Shared fixtures for mileage tracker tests."""

import copy

import pytest
from loguru import logger

from mileage import AppSettings, EntryStore, YamlFileStore
from mileage.errors import StorageError


class MemoryBackend:
    """In-memory key-value backend that counts writes."""

    def __init__(self, items=None):
        self.items = dict(items or {})
        self.writes = 0

    def get_item(self, key):
        return copy.deepcopy(self.items.get(key))

    def set_item(self, key, value):
        self.writes += 1
        self.items[key] = copy.deepcopy(value)


class FailingBackend:
    """Backend whose every read and write fails."""

    def get_item(self, key):
        raise StorageError("disk unavailable")

    def set_item(self, key, value):
        raise StorageError("disk unavailable")


@pytest.fixture
def settings():
    """Rolling period starting 2025-03-01 (365 days long)."""
    return AppSettings(yearly_limit=10000, start_date="2025-03-01T00:00:00.000Z")


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def memory_store(memory_backend):
    return EntryStore(memory_backend)


@pytest.fixture
def failing_store():
    return EntryStore(FailingBackend())


@pytest.fixture
def store_file(tmp_path):
    return tmp_path / "mileage.yaml"


@pytest.fixture
def file_store(store_file):
    return EntryStore(YamlFileStore(store_file))


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)

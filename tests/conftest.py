"""
Shared pytest fixtures for the Lockbox test suite.

  - Config singleton  -> reset per test, LOCKBOX_* env vars removed
  - Random source     -> deterministic bytes, records every request
  - uid factory       -> "uid-1", "uid-2", ...
  - Mapper/container  -> mapped attachments land in tmp_path
"""

import itertools
import os

import pytest

from lockbox.core.config import LockboxConfig
from lockbox.core.file_ops.mapping import AttachmentMapper
from lockbox.core.file_ops.secure_delete import SecureEraser
from lockbox.core.store.container import Container


class RecordingRandom:
    """Deterministic stand-in for secrets.token_bytes."""

    def __init__(self):
        self.requests = []
        self._counter = itertools.count()

    def __call__(self, n):
        self.requests.append(n)
        seed = next(self._counter)
        return bytes((seed + i) % 256 for i in range(n))

    @property
    def total(self):
        return sum(self.requests)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Keep the host's LOCKBOX_* variables and config singleton out of tests."""
    for key in list(os.environ):
        if key.startswith("LOCKBOX_"):
            monkeypatch.delenv(key)
    LockboxConfig.reset_instance()
    yield
    LockboxConfig.reset_instance()


@pytest.fixture
def random_source():
    return RecordingRandom()


@pytest.fixture
def eraser(random_source):
    return SecureEraser(random_bytes=random_source)


@pytest.fixture
def mapped_dir(tmp_path):
    directory = tmp_path / "mapped"
    directory.mkdir()
    return directory


@pytest.fixture
def mapper(eraser, mapped_dir):
    return AttachmentMapper(eraser=eraser, temp_dir=mapped_dir)


@pytest.fixture
def uid_factory():
    counter = itertools.count(1)
    return lambda: f"uid-{next(counter)}"


@pytest.fixture
def container(mapper, uid_factory):
    return Container(uid_factory=uid_factory, mapper=mapper, erase_iterations=2)

"""Shared test fixtures for Hydrated."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio

from hydrated.core.config import StorageConfig
from hydrated.store.directory import DirectoryProvider
from hydrated.store.manager import StorageManager


class CountingDirectoryProvider(DirectoryProvider):
    """Returns a fixed directory and counts how often it was asked."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.calls = 0

    async def get_temporary_directory(self) -> Path:
        self.calls += 1
        # Yield so concurrent builds actually interleave
        await asyncio.sleep(0)
        return self.path


@pytest.fixture
def storage_config():
    """Default storage config without loading from disk."""
    return StorageConfig()


@pytest.fixture
def directory_provider(tmp_path: Path):
    """Platform directory stand-in pointing at a per-test directory."""
    return CountingDirectoryProvider(tmp_path / "platform")


@pytest_asyncio.fixture
async def manager(storage_config, directory_provider):
    """A SQLite-backed manager whose box is deleted after the test."""
    manager = StorageManager(storage_config, directory_provider=directory_provider)
    yield manager
    await manager.teardown(delete_from_disk=True)

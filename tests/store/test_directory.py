"""Tests for directory providers."""

import tempfile
from pathlib import Path

import pytest

from hydrated.store.directory import FixedDirectoryProvider, TemporaryDirectoryProvider


@pytest.mark.asyncio
async def test_temporary_provider_uses_system_temp(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))
    provider = TemporaryDirectoryProvider(subdir="app")

    directory = await provider.get_temporary_directory()

    assert directory == tmp_path / "app"
    assert directory.is_dir()


@pytest.mark.asyncio
async def test_fixed_provider_expands_user(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    provider = FixedDirectoryProvider("~/support")

    assert await provider.get_temporary_directory() == tmp_path / "support"

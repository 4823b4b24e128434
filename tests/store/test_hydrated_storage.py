"""Tests for HydratedStorage against a mocked box."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from hydrated.store.hydrated import HydratedStorage

KEY = "__key__"
VALUE = "__value__"


@pytest.fixture
def box():
    box = MagicMock()
    box.put = AsyncMock()
    box.delete = AsyncMock()
    box.delete_from_disk = AsyncMock()
    box.flush = AsyncMock()
    return box


@pytest.fixture
def storage(box):
    return HydratedStorage(box)


# ━━━ read ━━━


def test_read_returns_none_when_box_not_open(box, storage):
    box.is_open = False
    assert storage.read(KEY) is None
    box.get.assert_not_called()


def test_read_returns_value_when_box_open(box, storage):
    box.is_open = True
    box.get.return_value = VALUE
    assert storage.read(KEY) == VALUE
    box.get.assert_called_once_with(KEY)


# ━━━ write ━━━


@pytest.mark.asyncio
async def test_write_does_nothing_when_box_not_open(box, storage):
    box.is_open = False
    await storage.write(KEY, VALUE)
    box.put.assert_not_called()


@pytest.mark.asyncio
async def test_write_puts_value_when_box_open(box, storage):
    box.is_open = True
    await storage.write(KEY, VALUE)
    box.put.assert_called_once_with(KEY, VALUE)


# ━━━ delete ━━━


@pytest.mark.asyncio
async def test_delete_does_nothing_when_box_not_open(box, storage):
    box.is_open = False
    await storage.delete(KEY)
    box.delete.assert_not_called()


@pytest.mark.asyncio
async def test_delete_removes_key_when_box_open(box, storage):
    box.is_open = True
    await storage.delete(KEY)
    box.delete.assert_called_once_with(KEY)


# ━━━ clear ━━━


@pytest.mark.asyncio
async def test_clear_does_nothing_when_box_not_open(box, storage):
    box.is_open = False
    await storage.clear()
    box.delete_from_disk.assert_not_called()


@pytest.mark.asyncio
async def test_clear_deletes_box_when_box_open(box, storage):
    box.is_open = True
    await storage.clear()
    box.delete_from_disk.assert_awaited_once()


@pytest.mark.asyncio
async def test_clear_hands_deletion_to_owner(box):
    owner = AsyncMock()
    storage = HydratedStorage(box, on_clear=owner)
    box.is_open = True

    await storage.clear()

    owner.assert_awaited_once_with(storage)
    box.delete_from_disk.assert_not_called()


@pytest.mark.asyncio
async def test_clear_skips_owner_when_box_not_open(box):
    owner = AsyncMock()
    storage = HydratedStorage(box, on_clear=owner)
    box.is_open = False

    await storage.clear()

    owner.assert_not_called()


@pytest.mark.asyncio
async def test_clear_without_owner(box, storage):
    """No on_clear callback is fine."""
    box.is_open = True
    await storage.clear()
    box.delete_from_disk.assert_awaited_once()


# ━━━ extras ━━━


def test_keys_empty_when_box_not_open(box, storage):
    box.is_open = False
    assert storage.keys() == []
    box.keys.assert_not_called()


@pytest.mark.asyncio
async def test_flush_skipped_when_box_not_open(box, storage):
    box.is_open = False
    await storage.flush()
    box.flush.assert_not_called()

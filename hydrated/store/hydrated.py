"""
HydratedStorage — the key-value store state snapshots are saved to.

Wraps one open Box. Every operation checks whether the box is open first:
against a closed box, reads return None and writes, deletes and clears do
nothing. A caller holding a stale handle after the box was cleared keeps
working, it just stops persisting anything until a new handle is built.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from hydrated.store.base import Box, Storage, completed

logger = logging.getLogger(__name__)


class HydratedStorage(Storage):
    """
    Storage backed by a Box.

    Usage:
        storage = await manager.build()

        storage.write("CounterState", {"value": 3})   # fire and forget
        await storage.write("CounterState", {"value": 4})   # durable
        storage.read("CounterState")  # {"value": 4}

        await storage.clear()  # box deleted, next build starts fresh

    The box is not owned here. clear() hands the deletion to the owner
    through on_clear, so the owner can delete the box and forget this
    handle in one step. Without an owner the box is deleted directly.
    """

    def __init__(
        self,
        box: Box,
        on_clear: Callable[[HydratedStorage], Awaitable[None]] | None = None,
    ) -> None:
        self._box = box
        self._on_clear = on_clear

    @property
    def box(self) -> Box:
        return self._box

    @property
    def is_open(self) -> bool:
        return self._box.is_open

    def read(self, key: str) -> Any:
        if not self._box.is_open:
            return None
        return self._box.get(key)

    def write(self, key: str, value: Any) -> Awaitable[None]:
        """
        Store value under key.

        The value is readable as soon as this returns; await the result to
        wait until it is on disk.
        """
        if not self._box.is_open:
            return completed()
        return self._box.put(key, value)

    def delete(self, key: str) -> Awaitable[None]:
        if not self._box.is_open:
            return completed()
        return self._box.delete(key)

    async def clear(self) -> None:
        """Delete the box from disk. Safe to call again afterwards."""
        if not self._box.is_open:
            return
        if self._on_clear is not None:
            await self._on_clear(self)
        else:
            await self._box.delete_from_disk()
        logger.debug(f"Cleared storage box '{self._box.name}'")

    def keys(self) -> list[str]:
        if not self._box.is_open:
            return []
        return self._box.keys()

    async def flush(self) -> None:
        if self._box.is_open:
            await self._box.flush()

"""
Box and Storage interfaces.

A Box is the capability the storage engine provides: a named key-value
unit with an in-memory view that is read synchronously and persisted
asynchronously. Storage is the surface a state-management library
consumes to save and restore state snapshots.

Implementations:
    SQLiteBox — file-based, default
    InMemoryBox — for testing and ephemeral use
    HydratedStorage — Storage on top of any Box
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable


class Box(ABC):
    """
    Abstract base class for storage boxes.

    Keys are strings. Values are opaque JSON-compatible payloads; the box
    never interprets them.

    put() and delete() apply the change to the in-memory view before they
    return, so get() sees it immediately. The returned awaitable completes
    once the change is durable.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Box name, e.g. "hydrated_box"."""
        ...

    @property
    @abstractmethod
    def path(self) -> Path | None:
        """On-disk location, or None for boxes without one."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by key. Returns default if not found."""
        ...

    @abstractmethod
    def put(self, key: str, value: Any) -> Awaitable[None]:
        """Set a value. Overwrites if exists."""
        ...

    @abstractmethod
    def delete(self, key: str) -> Awaitable[None]:
        """Delete a key. No-op if absent."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """List all keys, sorted."""
        ...

    def contains(self, key: str) -> bool:
        return key in self.keys()

    @abstractmethod
    async def flush(self) -> None:
        """Wait until every pending change is durable."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Flush and close the box. The data stays on disk."""
        ...

    @abstractmethod
    async def delete_from_disk(self) -> None:
        """Close the box and remove its files."""
        ...


class Storage(ABC):
    """Interface used by a state-management library to persist snapshots."""

    @abstractmethod
    def read(self, key: str) -> Any:
        """Return the value stored under key, or None."""
        ...

    @abstractmethod
    def write(self, key: str, value: Any) -> Awaitable[None]:
        """Persist value under key."""
        ...

    @abstractmethod
    def delete(self, key: str) -> Awaitable[None]:
        """Remove the value stored under key."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every stored value."""
        ...


def completed() -> Awaitable[None]:
    """An awaitable that is already done, for changes with nothing to wait on."""
    future = asyncio.get_running_loop().create_future()
    future.set_result(None)
    return future

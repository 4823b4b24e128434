"""
In-memory box — for testing.

Simple dict-based storage. Data lost when the box is closed or the
process exits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable

from hydrated.store.base import Box, completed


class InMemoryBox(Box):
    """
    In-memory box for testing.

    Usage:
        box = await InMemoryBox.open("hydrated_box")
        await box.put("key", {"count": 1})
        assert box.get("key") == {"count": 1}
    """

    def __init__(self, name: str = "hydrated_box", path: Path | None = None) -> None:
        self._name = name
        self._path = path
        self._data: dict[str, Any] = {}
        self._open = True

    @classmethod
    async def open(cls, name: str, directory: Path | None = None) -> InMemoryBox:
        """Create an open box. The directory only determines the reported path."""
        path = Path(directory) / f"{name}.db" if directory is not None else None
        return cls(name, path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._open

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def put(self, key: str, value: Any) -> Awaitable[None]:
        self._data[key] = value
        return completed()

    def delete(self, key: str) -> Awaitable[None]:
        self._data.pop(key, None)
        return completed()

    def keys(self) -> list[str]:
        return sorted(self._data)

    def contains(self, key: str) -> bool:
        return key in self._data

    async def flush(self) -> None:
        pass

    async def close(self) -> None:
        self._open = False

    async def delete_from_disk(self) -> None:
        self._data.clear()
        self._open = False

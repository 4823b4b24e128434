"""
Directory providers — where a box lives when no directory is given.

The platform is asked for a writable directory at most once per build.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectoryProvider(ABC):
    """Supplies a writable directory for the storage box."""

    @abstractmethod
    async def get_temporary_directory(self) -> Path:
        ...


class TemporaryDirectoryProvider(DirectoryProvider):
    """
    Uses the system temporary directory.

    Usage:
        provider = TemporaryDirectoryProvider()
        path = await provider.get_temporary_directory()  # /tmp/hydrated
    """

    def __init__(self, subdir: str = "hydrated") -> None:
        self._subdir = subdir

    async def get_temporary_directory(self) -> Path:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._resolve)

    def _resolve(self) -> Path:
        path = Path(tempfile.gettempdir()) / self._subdir
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Resolved temporary directory {path}")
        return path


class FixedDirectoryProvider(DirectoryProvider):
    """Always returns the same directory, e.g. an application-support path."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    async def get_temporary_directory(self) -> Path:
        return self._path

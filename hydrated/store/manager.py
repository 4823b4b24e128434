"""
StorageManager — owns the one storage box of a process.

The manager resolves the storage directory, opens the box once and hands
the same HydratedStorage to every caller afterwards. Create one manager
at startup and pass it to whatever needs storage.

Build sequence:
    1. Cached handle with an open box? Return it. Nothing is resolved or reopened.
    2. Directory: explicit argument > config.directory > directory provider
    3. Open <directory>/<box_name>.db
    4. Cache and return the HydratedStorage wrapping it

If opening fails, BuildError is raised and nothing is cached, so the
next build tries again from scratch.

clear() and teardown() take the same lock as build() and only forget the
handle once its box is closed or deleted, so a build racing them waits
instead of opening a second box on the same file.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

from hydrated.core.config import StorageConfig
from hydrated.core.errors import BuildError
from hydrated.store.base import Box
from hydrated.store.directory import DirectoryProvider, TemporaryDirectoryProvider
from hydrated.store.hydrated import HydratedStorage
from hydrated.store.memory import InMemoryBox
from hydrated.store.sqlite import SQLiteBox

logger = logging.getLogger(__name__)

# (box name, directory) -> open box
BoxOpener = Callable[[str, Path], Awaitable[Box]]


class StorageManager:
    """
    Lifecycle owner of the storage handle.

    Usage:
        async with StorageManager() as manager:
            storage = await manager.build()
            assert await manager.build() is storage

        # Tests inject a fake box and a fixed directory
        manager = StorageManager(
            directory_provider=FixedDirectoryProvider(tmp_path),
            box_opener=InMemoryBox.open,
        )

    Leaving the context tears the handle down. A manager that is never
    torn down still closes its SQLite box when the event loop shuts down.
    """

    def __init__(
        self,
        config: StorageConfig | None = None,
        directory_provider: DirectoryProvider | None = None,
        box_opener: BoxOpener | None = None,
    ) -> None:
        self._config = config or StorageConfig()
        self._directory_provider = directory_provider or TemporaryDirectoryProvider(
            self._config.temp_subdir
        )
        self._box_opener = box_opener or self._default_opener()
        self._instance: HydratedStorage | None = None
        # Guards build, clear and teardown so only one box is ever open
        self._lock = asyncio.Lock()

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def instance(self) -> HydratedStorage | None:
        """The cached storage handle, if one has been built."""
        return self._instance

    async def build(
        self, storage_directory: str | Path | None = None
    ) -> HydratedStorage:
        """Return the storage handle, opening the box on first use."""
        instance = self._instance
        if instance is not None and instance.is_open:
            return instance

        # A closing handle counts as gone: wait for its box, then open fresh
        async with self._lock:
            # Another caller may have finished building while we waited
            if self._instance is not None and self._instance.is_open:
                return self._instance
            self._instance = None

            box_name = self._config.box_name
            directory: Path | None = None
            try:
                directory = await self._resolve_directory(storage_directory)
                box = await self._box_opener(box_name, directory)
            except Exception as e:
                where = directory if directory is not None else "the platform directory"
                logger.error(f"Failed to open box '{box_name}' in {where}: {e}")
                raise BuildError(
                    f"Failed to open box '{box_name}' in {where}: {e}",
                    directory=str(directory) if directory is not None else "",
                    box_name=box_name,
                ) from e

            self._instance = HydratedStorage(box, on_clear=self._clear)
            logger.info(f"Storage box '{box_name}' ready at {box.path or directory}")
            return self._instance

    async def teardown(self, delete_from_disk: bool = False) -> None:
        """Close the cached box (or delete it from disk), then forget the handle."""
        async with self._lock:
            instance = self._instance
            if instance is None:
                return
            try:
                if delete_from_disk:
                    await instance.box.delete_from_disk()
                else:
                    await instance.box.close()
            finally:
                self._instance = None
        logger.debug("Storage manager torn down")

    async def __aenter__(self) -> StorageManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.teardown()

    # ━━━ Internals ━━━

    async def _resolve_directory(self, storage_directory: str | Path | None) -> Path:
        if storage_directory is not None:
            return Path(storage_directory).expanduser()
        configured = self._config.resolved_directory()
        if configured is not None:
            return configured
        return await self._directory_provider.get_temporary_directory()

    async def _clear(self, storage: HydratedStorage) -> None:
        async with self._lock:
            await storage.box.delete_from_disk()
            # A stale handle clearing itself must not drop a newer one
            if self._instance is storage:
                self._instance = None

    def _default_opener(self) -> BoxOpener:
        if self._config.backend == "memory":
            return InMemoryBox.open

        synchronous = self._config.synchronous

        async def open_sqlite(name: str, directory: Path) -> Box:
            return await SQLiteBox.open(name, directory, synchronous=synchronous)

        return open_sqlite

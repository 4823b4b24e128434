"""
SQLite box.

Uses aiosqlite for async SQLite access.
WAL mode enabled so a crash mid-write never leaves a torn entry.

The whole box is loaded into memory when it is opened. Reads are served
from memory; every put/delete updates memory first and is then persisted
by a background task. Persistence tasks run one at a time in the order
they were issued, so the value on disk is always the last one written.

Keys whose background write has not committed yet are tracked as dirty
and written out by close(). The box also closes itself when its event
loop shuts down (asyncio.run cancelling leftover tasks), so an open box
never keeps aiosqlite's worker thread and the process alive.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Coroutine

import aiofiles.os
import aiosqlite

from hydrated.core.errors import StorageError
from hydrated.store.base import Box, completed

logger = logging.getLogger(__name__)

BOX_EXTENSION = "db"

_SYNCHRONOUS_MODES = {"OFF", "NORMAL", "FULL", "EXTRA"}

# Files SQLite may leave next to the box in WAL mode
_SIDECAR_SUFFIXES = ("", "-wal", "-shm", "-journal")

_UPSERT = """
    INSERT INTO entries (key, value, updated_at) VALUES (?, ?, ?)
    ON CONFLICT(key) DO UPDATE SET
        value = excluded.value,
        updated_at = excluded.updated_at
"""
_DELETE = "DELETE FROM entries WHERE key = ?"


class SQLiteBox(Box):
    """
    SQLite-backed box.

    Usage:
        box = await SQLiteBox.open("hydrated_box", Path("/tmp/hydrated"))

        box.put("counter", {"value": 1})   # visible to get() right away
        await box.put("counter", {"value": 2})   # awaited: durable
        box.get("counter")  # {"value": 2}

        await box.close()
    """

    def __init__(
        self,
        name: str,
        path: Path,
        db: aiosqlite.Connection,
        entries: dict[str, Any],
    ) -> None:
        self._name = name
        self._path = path
        self._db: aiosqlite.Connection | None = db
        self._entries = entries
        self._open = True
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()
        # key -> version of its latest uncommitted change
        self._dirty: dict[str, int] = {}
        self._version = 0
        self._failure: StorageError | None = None
        self._closed = asyncio.Event()
        self._guard = asyncio.get_running_loop().create_task(
            self._close_on_shutdown(), name=f"sqlite-box:{name}"
        )

    @classmethod
    async def open(
        cls,
        name: str,
        directory: str | Path,
        synchronous: str = "NORMAL",
    ) -> SQLiteBox:
        """
        Open the box at <directory>/<name>.db, creating it if needed.

        Raises StorageError if the file cannot be opened or is not a box.
        No connection is left open when that happens.
        """
        if synchronous.upper() not in _SYNCHRONOUS_MODES:
            raise StorageError(f"Unknown synchronous mode: {synchronous}")

        directory = Path(directory).expanduser()
        path = directory / f"{name}.{BOX_EXTENSION}"
        db: aiosqlite.Connection | None = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            db = await aiosqlite.connect(str(path))

            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute(f"PRAGMA synchronous={synchronous.upper()}")
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            await db.commit()

            async with db.execute("SELECT key, value FROM entries") as cursor:
                rows = await cursor.fetchall()
            entries = {key: json.loads(value) for key, value in rows}

        except Exception as e:
            if db is not None:
                try:
                    await db.close()
                except Exception as close_error:
                    logger.debug(f"Ignoring close failure for {path}: {close_error}")
            raise StorageError(
                f"Failed to open box '{name}' at {path}: {e}",
                details={"path": str(path)},
            ) from e

        logger.debug(f"Opened box '{name}' at {path} ({len(entries)} entries)")
        return cls(name, path, db, entries)

    # ━━━ Properties ━━━

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._open

    # ━━━ Reads ━━━

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def contains(self, key: str) -> bool:
        return key in self._entries

    # ━━━ Writes ━━━

    def put(self, key: str, value: Any) -> Awaitable[None]:
        if not self._open:
            return completed()
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key '{key}' is not serializable: {e}") from e

        self._entries[key] = value
        version = self._mark_dirty(key)
        return self._schedule(
            self._execute(_UPSERT, (key, payload, time.time()), key, version)
        )

    def delete(self, key: str) -> Awaitable[None]:
        if not self._open:
            return completed()
        self._entries.pop(key, None)
        version = self._mark_dirty(key)
        return self._schedule(self._execute(_DELETE, (key,), key, version))

    def _mark_dirty(self, key: str) -> int:
        self._version += 1
        self._dirty[key] = self._version
        return self._version

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> Awaitable[None]:
        """Start persisting in the background. Callers cannot cancel it."""
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return asyncio.shield(task)

    async def _execute(self, sql: str, params: tuple, key: str, version: int) -> None:
        async with self._lock:
            # Closed or deleted while this write was queued
            if self._db is None:
                return
            try:
                await self._db.execute(sql, params)
                await self._db.commit()
            except Exception as e:
                error = StorageError(f"Failed to persist '{key}' to {self._path}: {e}")
                # Kept for flush()/close(); the key stays dirty
                if self._failure is None:
                    self._failure = error
                raise error from e
            if self._dirty.get(key) == version:
                del self._dirty[key]

    async def _write_dirty(self) -> None:
        """Write out every key whose background write never committed. Lock held."""
        if not self._dirty or self._db is None:
            return
        try:
            for key in list(self._dirty):
                if key in self._entries:
                    payload = json.dumps(self._entries[key])
                    await self._db.execute(_UPSERT, (key, payload, time.time()))
                else:
                    await self._db.execute(_DELETE, (key,))
            await self._db.commit()
        except Exception as e:
            raise StorageError(f"Failed to persist pending writes to {self._path}: {e}") from e
        self._dirty.clear()

    # ━━━ Lifecycle ━━━

    async def flush(self) -> None:
        """
        Wait for every pending write.

        Raises the first persistence failure since the last flush, including
        failures of writes nobody awaited.
        """
        if self._pending:
            await asyncio.wait(list(self._pending))
        if self._failure is not None:
            error, self._failure = self._failure, None
            raise error

    async def close(self) -> None:
        self._open = False
        self._closed.set()
        try:
            await self.flush()
        finally:
            async with self._lock:
                if self._db is not None:
                    try:
                        await self._write_dirty()
                    finally:
                        await self._db.close()
                        self._db = None
                        logger.debug(f"Closed box '{self._name}'")

    async def delete_from_disk(self) -> None:
        # Writes still waiting for the lock are dropped once the connection is gone
        self._open = False
        self._closed.set()
        self._entries.clear()
        self._dirty.clear()
        async with self._lock:
            if self._db is not None:
                await self._db.close()
                self._db = None
            for suffix in _SIDECAR_SUFFIXES:
                target = self._path.with_name(self._path.name + suffix)
                if await aiofiles.os.path.exists(target):
                    await aiofiles.os.remove(target)
        logger.info(f"Deleted box '{self._name}' from {self._path}")

    async def _close_on_shutdown(self) -> None:
        """Close the box if the loop cancels this task while the box is still open."""
        try:
            await self._closed.wait()
        except asyncio.CancelledError:
            if self._db is not None:
                logger.debug(f"Event loop shutting down, closing box '{self._name}'")
                try:
                    await self.close()
                except StorageError as e:
                    logger.error(f"Failed to close box '{self._name}' on shutdown: {e}")
            raise

"""
Hydrated — persistent storage for state-management snapshots.

Public API:
    from hydrated import StorageManager, HydratedStorage
"""

__version__ = "0.1.0"

# Core
from hydrated.core.config import HydratedConfig, StorageConfig
from hydrated.core.errors import BuildError, HydratedError, StorageError

# Store
from hydrated.store.base import Box, Storage
from hydrated.store.directory import (
    DirectoryProvider,
    FixedDirectoryProvider,
    TemporaryDirectoryProvider,
)
from hydrated.store.hydrated import HydratedStorage
from hydrated.store.manager import StorageManager
from hydrated.store.memory import InMemoryBox
from hydrated.store.sqlite import SQLiteBox

__all__ = [
    # Core
    "HydratedConfig",
    "StorageConfig",
    "HydratedError",
    "StorageError",
    "BuildError",
    # Store
    "Box",
    "Storage",
    "HydratedStorage",
    "StorageManager",
    "InMemoryBox",
    "SQLiteBox",
    "DirectoryProvider",
    "TemporaryDirectoryProvider",
    "FixedDirectoryProvider",
]

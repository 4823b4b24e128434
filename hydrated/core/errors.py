"""
Hydrated exception hierarchy.

Every error in the package inherits from HydratedError.

Usage:
    try:
        storage = await manager.build()
    except BuildError as e:
        # The box could not be opened; nothing was cached, retry later
    except HydratedError as e:
        # Any other hydrated failure
"""

from __future__ import annotations


class HydratedError(Exception):
    """Base exception for all Hydrated errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(HydratedError):
    """Configuration is invalid, missing, or malformed."""

    pass


class StorageError(HydratedError):
    """Storage backend failure — open errors, encoding errors, corruption."""

    pass


class BuildError(StorageError):
    """The box could not be opened or created while building a storage handle."""

    def __init__(
        self,
        message: str,
        directory: str = "",
        box_name: str = "",
        details: dict | None = None,
    ):
        self.directory = directory
        self.box_name = box_name
        super().__init__(message, details)

"""
Hydrated Configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (HYDRATED_*)
3. Project config (./hydrated.toml)
4. User config (~/.hydrated/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    HYDRATED_STORAGE_DIRECTORY → storage.directory
    HYDRATED_STORAGE_BOX_NAME → storage.box_name
    HYDRATED_STORAGE_BACKEND → storage.backend
    HYDRATED_LOG_LEVEL → logging.level
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from hydrated.core.errors import ConfigError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class StorageConfig(BaseModel):
    """Storage box configuration."""

    box_name: str = "hydrated_box"
    directory: str | None = None
    backend: Literal["sqlite", "memory"] = "sqlite"
    temp_subdir: str = "hydrated"
    synchronous: Literal["OFF", "NORMAL", "FULL", "EXTRA"] = "NORMAL"

    def resolved_directory(self) -> Path | None:
        """Configured directory with ~ expanded, or None if unset."""
        if not self.directory:
            return None
        return Path(self.directory).expanduser()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    log_dir: str | None = None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class HydratedConfig(BaseModel):
    """Root configuration for Hydrated."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> HydratedConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.hydrated/config.toml)
        user_config_path = user_path or Path.home() / ".hydrated" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./hydrated.toml)
        project_config_path = project_path or Path.cwd() / "hydrated.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return HydratedConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from HYDRATED_* environment variables."""
    result: dict[str, Any] = {}

    env_mapping = {
        "HYDRATED_STORAGE_DIRECTORY": ("storage", "directory"),
        "HYDRATED_STORAGE_BOX_NAME": ("storage", "box_name"),
        "HYDRATED_STORAGE_BACKEND": ("storage", "backend"),
        "HYDRATED_STORAGE_SYNCHRONOUS": ("storage", "synchronous"),
        "HYDRATED_LOG_LEVEL": ("logging", "level"),
        "HYDRATED_LOG_DIR": ("logging", "log_dir"),
    }

    for env_var, (section, key) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result.setdefault(section, {})[key] = value

    return result


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            for var_name in pattern.findall(value):
                value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
            data[key] = value

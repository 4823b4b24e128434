"""Tests for the Config system."""

import os
import pytest
from pathlib import Path
from hydrated.core.config import HydratedConfig, _deep_merge, _substitute_env_vars
from hydrated.core.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep real user/project config files and HYDRATED_* vars out of tests."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("HYDRATED_"):
            monkeypatch.delenv(name)


def test_default_config():
    """Default config has sensible values."""
    config = HydratedConfig()

    assert config.storage.box_name == "hydrated_box"
    assert config.storage.directory is None
    assert config.storage.backend == "sqlite"
    assert config.storage.synchronous == "NORMAL"
    assert config.storage.resolved_directory() is None
    assert config.logging.level == "WARNING"


def test_load_with_overrides():
    """Explicit overrides take highest precedence."""
    config = HydratedConfig.load(
        overrides={"storage": {"box_name": "ui_state", "backend": "memory"}}
    )

    assert config.storage.box_name == "ui_state"
    assert config.storage.backend == "memory"
    # Defaults still work for non-overridden values
    assert config.storage.synchronous == "NORMAL"


def test_env_var_loading(monkeypatch, tmp_path):
    """HYDRATED_* environment variables are loaded."""
    monkeypatch.setenv("HYDRATED_STORAGE_DIRECTORY", str(tmp_path / "boxes"))
    monkeypatch.setenv("HYDRATED_STORAGE_BOX_NAME", "env_box")
    monkeypatch.setenv("HYDRATED_LOG_LEVEL", "DEBUG")

    config = HydratedConfig.load()

    assert config.storage.resolved_directory() == tmp_path / "boxes"
    assert config.storage.box_name == "env_box"
    assert config.logging.level == "DEBUG"


def test_project_toml_overrides_user_toml(tmp_path):
    user = tmp_path / "user.toml"
    user.write_text('[storage]\nbox_name = "user_box"\nsynchronous = "FULL"\n')
    project = tmp_path / "project.toml"
    project.write_text('[storage]\nbox_name = "project_box"\n')

    config = HydratedConfig.load(project_path=project, user_path=user)

    assert config.storage.box_name == "project_box"
    assert config.storage.synchronous == "FULL"


def test_env_overrides_toml(monkeypatch, tmp_path):
    project = tmp_path / "project.toml"
    project.write_text('[storage]\nbox_name = "project_box"\n')
    monkeypatch.setenv("HYDRATED_STORAGE_BOX_NAME", "env_box")

    config = HydratedConfig.load(project_path=project)

    assert config.storage.box_name == "env_box"


def test_invalid_backend_raises():
    with pytest.raises(ConfigError):
        HydratedConfig.load(overrides={"storage": {"backend": "hive"}})


def test_malformed_toml_raises(tmp_path):
    broken = tmp_path / "broken.toml"
    broken.write_text("[storage\nbox_name = ")

    with pytest.raises(ConfigError):
        HydratedConfig.load(project_path=broken)


def test_env_var_substitution(monkeypatch):
    """${VAR} in config values gets replaced with env var values."""
    monkeypatch.setenv("BOX_ROOT", "/var/boxes")
    data = {"storage": {"directory": "${BOX_ROOT}/ui"}, "name": "${MISSING_VAR}x"}

    _substitute_env_vars(data)

    assert data["storage"]["directory"] == "/var/boxes/ui"
    assert data["name"] == "x"


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}, "e": 5}
    override = {"b": {"c": 20, "f": 6}, "g": 7}

    _deep_merge(base, override)

    assert base == {"a": 1, "b": {"c": 20, "d": 3, "f": 6}, "e": 5, "g": 7}

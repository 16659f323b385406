"""Tests for synthfs.cli._serve.load_filesystem: import strings and config overrides."""

import sys
import types

import pytest

from synthfs.app import Filesystem
from synthfs.cli._serve import load_filesystem
from synthfs.config import FSConfig


@pytest.fixture
def routes_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Register a fake routes module on sys.modules."""
    mod = types.ModuleType("_fake_synthfs_routes")
    mod.fs = Filesystem()  # type: ignore[attr-defined]
    mod.custom = Filesystem(FSConfig(timeout=3.0))  # type: ignore[attr-defined]
    mod.not_a_fs = "just a string"  # type: ignore[attr-defined]
    mod.build = Filesystem  # type: ignore[attr-defined]
    mod.bad_factory = lambda: 42  # type: ignore[attr-defined]

    def broken() -> Filesystem:
        raise RuntimeError("no browser")

    mod.broken = broken  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_synthfs_routes", mod)
    return mod


class TestLoadFilesystem:
    def test_explicit_attribute(self, routes_module: types.ModuleType) -> None:
        assert load_filesystem("_fake_synthfs_routes:custom") is routes_module.custom

    def test_default_attribute(self, routes_module: types.ModuleType) -> None:
        """Omitting :attr defaults to 'fs'."""
        assert load_filesystem("_fake_synthfs_routes") is routes_module.fs

    def test_factory_is_called(self, routes_module: types.ModuleType) -> None:
        assert isinstance(load_filesystem("_fake_synthfs_routes:build"), Filesystem)

    def test_factory_returning_wrong_type(self, routes_module: types.ModuleType) -> None:
        with pytest.raises(TypeError, match=r"expected a synthfs\.Filesystem"):
            load_filesystem("_fake_synthfs_routes:bad_factory")

    def test_factory_error_wrapped(self, routes_module: types.ModuleType) -> None:
        with pytest.raises(TypeError, match="no browser"):
            load_filesystem("_fake_synthfs_routes:broken")

    def test_wrong_type(self, routes_module: types.ModuleType) -> None:
        with pytest.raises(TypeError, match=r"is a str, expected a synthfs\.Filesystem"):
            load_filesystem("_fake_synthfs_routes:not_a_fs")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            load_filesystem("nonexistent_module_xyz:fs")

    def test_missing_attribute(self, routes_module: types.ModuleType) -> None:
        with pytest.raises(AttributeError):
            load_filesystem("_fake_synthfs_routes:does_not_exist")


class TestConfigOverrides:
    def test_overrides_replace_config_fields(self, routes_module: types.ModuleType) -> None:
        fs = load_filesystem("_fake_synthfs_routes", timeout=0.5, log_level="debug")
        assert fs.config.timeout == 0.5
        assert fs.config.log_level == "debug"

    def test_none_overrides_keep_existing_values(self, routes_module: types.ModuleType) -> None:
        fs = load_filesystem("_fake_synthfs_routes:custom", timeout=None, log_level=None)
        assert fs.config.timeout == 3.0
        assert fs.config.log_level == "info"

    def test_unknown_override_rejected(self, routes_module: types.ModuleType) -> None:
        with pytest.raises(TypeError):
            load_filesystem("_fake_synthfs_routes", colour="blue")

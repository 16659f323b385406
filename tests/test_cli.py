"""Tests for synthfs.cli: CLI entrypoint and argument parsing."""

import pytest

from synthfs.cli import main


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_serve_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_serve_missing_fs(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve"])
        assert exc_info.value.code == 2

    def test_invalid_log_level(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", "mod:fs", "--log-level", "loud"])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "synthfs" in captured.out


class TestServeCommand:
    def test_applies_overrides_and_serves(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import sys
        import types

        from synthfs.app import Filesystem

        served: list[Filesystem] = []
        fs = Filesystem()
        mod = types.ModuleType("_fake_cli_routes")
        mod.fs = fs  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "_fake_cli_routes", mod)
        monkeypatch.setattr(Filesystem, "serve", lambda self: served.append(self))

        main(["serve", "_fake_cli_routes", "--timeout", "2.5", "--log-level", "warning"])

        assert served == [fs]
        assert fs.config.timeout == 2.5
        assert fs.config.log_level == "warning"

    def test_unresolvable_fs_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", "nonexistent_module_xyz:fs"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

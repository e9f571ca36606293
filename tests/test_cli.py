"""
Tests for command-line parsing and exit codes.
"""

import pytest

from system_setup import main as main_mod
from system_setup.config import System76Mode
from system_setup.errors import PreconditionFailure


class TestParseConfig:
    def test_defaults(self):
        cfg = main_mod.parse_config([])
        assert cfg.system76 is System76Mode.AUTO
        assert cfg.install_nvidia_drivers is True
        assert cfg.install_flatpak is True
        assert cfg.pause_for_reboot is True
        assert cfg.dry_run is False
        assert cfg.catalog_path is None
        assert cfg.artifacts_dir == "setup_artifacts"

    def test_all_flags(self):
        cfg = main_mod.parse_config(
            [
                "--force-system76",
                "--skip-system76-nvidia",
                "--skip-flatpak",
                "--skip-reboot-pause",
                "--dry-run",
                "--artifacts-dir",
                "/tmp/a",
            ]
        )
        assert cfg.system76 is System76Mode.FORCE
        assert cfg.install_nvidia_drivers is False
        assert cfg.install_flatpak is False
        assert cfg.pause_for_reboot is False
        assert cfg.dry_run is True
        assert cfg.artifacts_dir == "/tmp/a"

    def test_last_system76_flag_wins(self):
        assert main_mod.parse_config(["--force-system76", "--skip-system76"]).system76 is System76Mode.SKIP
        assert main_mod.parse_config(["--skip-system76", "--force-system76"]).system76 is System76Mode.FORCE

    def test_config_is_immutable(self):
        cfg = main_mod.parse_config([])
        with pytest.raises(Exception):
            cfg.dry_run = True  # type: ignore[misc]


class TestMain:
    def test_unknown_flag_exits_nonzero_before_any_step(self, monkeypatch, capsys):
        def _boom(*a, **kw):
            raise AssertionError("run() must not be reached")

        monkeypatch.setattr(main_mod, "run", _boom)
        with pytest.raises(SystemExit) as exc:
            main_mod.main(["--no-such-flag"])
        assert exc.value.code != 0
        err = capsys.readouterr().err
        assert "usage:" in err
        assert "--no-such-flag" in err

    def test_help_exits_zero(self, monkeypatch, capsys):
        monkeypatch.setattr(main_mod, "run", lambda *a, **kw: None)
        with pytest.raises(SystemExit) as exc:
            main_mod.main(["--help"])
        assert exc.value.code == 0
        assert "--skip-flatpak" in capsys.readouterr().out

    def test_short_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main_mod.main(["-h"])
        assert exc.value.code == 0

    def test_precondition_failure_returns_1(self, monkeypatch):
        def _fail(config, **kw):
            raise PreconditionFailure("Failed to obtain sudo privileges")

        monkeypatch.setattr(main_mod, "run", _fail)
        assert main_mod.main([]) == 1

    def test_success_returns_0(self, monkeypatch):
        monkeypatch.setattr(main_mod, "run", lambda config, **kw: None)
        assert main_mod.main(["--dry-run"]) == 0

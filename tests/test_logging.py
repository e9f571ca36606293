"""
Tests for the run log file and console formatting.
"""

import logging
import re

from system_setup.logging_utils import (
    DRY_RUN,
    SECTION,
    SKIP,
    SUCCESS,
    ConsoleFormatter,
    configure_logging,
    run_log_name,
)


def _record(level, msg):
    return logging.LogRecord("system_setup.test", level, __file__, 1, msg, None, None)


class TestLogFile:
    def test_name_has_timestamp(self):
        assert re.fullmatch(r"setup-\d{8}-\d{6}\.log", run_log_name())

    def test_line_format(self, tmp_path):
        path = configure_logging(log_dir=str(tmp_path), also_console=False, log_name="run.log")
        log = logging.getLogger("system_setup.test")
        log.log(SKIP, "Git")
        log.log(SUCCESS, "Node.js installed")
        log.debug("CMD apt-get update")

        lines = (tmp_path / "run.log").read_text(encoding="utf-8").splitlines()
        assert path == str(tmp_path / "run.log")
        assert re.fullmatch(r"\[\d{4}-\d\d-\d\d \d\d:\d\d:\d\d\] \[INFO\] Log file: .*run\.log", lines[0])
        assert lines[1].endswith("[SKIP] Git")
        assert lines[2].endswith("[SUCCESS] Node.js installed")
        assert lines[3].endswith("[DEBUG] CMD apt-get update")

    def test_creates_log_dir(self, tmp_path):
        configure_logging(log_dir=str(tmp_path / "a" / "b"), also_console=False, log_name="x.log")
        assert (tmp_path / "a" / "b" / "x.log").exists()

    def test_reconfigure_replaces_handlers(self, tmp_path):
        root = logging.getLogger()
        before = len(root.handlers)
        configure_logging(log_dir=str(tmp_path), log_name="one.log")
        configure_logging(log_dir=str(tmp_path), log_name="two.log")
        assert len(root.handlers) == before + 3
        logging.getLogger("system_setup.test").info("second only")
        assert "second only" not in (tmp_path / "one.log").read_text(encoding="utf-8")
        assert "second only" in (tmp_path / "two.log").read_text(encoding="utf-8")


class TestConsole:
    def test_prefixes_without_color(self):
        f = ConsoleFormatter(use_colors=False)
        assert f.format(_record(logging.INFO, "Updating")) == "[*] Updating"
        assert f.format(_record(SUCCESS, "done")) == "[✓] done"
        assert f.format(_record(logging.WARNING, "careful")) == "[!] careful"
        assert f.format(_record(logging.ERROR, "broken")) == "[✗] broken"
        assert f.format(_record(DRY_RUN, "apt install curl")) == "[DRY] Would: apt install curl"
        assert f.format(_record(SKIP, "Git")) == "[−] Git (already installed)"

    def test_section_banner(self):
        out = ConsoleFormatter(use_colors=False).format(_record(SECTION, "Flatpak Setup"))
        lines = out.splitlines()
        assert "  Flatpak Setup" in lines
        assert lines[1] == lines[3] == "━" * 60

    def test_colors(self):
        out = ConsoleFormatter(use_colors=True).format(_record(logging.ERROR, "broken"))
        assert out.startswith("\033[0;31m[✗]\033[0m")

    def test_error_goes_to_stderr(self, tmp_path, capsys):
        configure_logging(log_dir=str(tmp_path), log_name="c.log")
        log = logging.getLogger("system_setup.test")
        log.info("to stdout")
        log.error("to stderr")
        log.debug("file only")
        captured = capsys.readouterr()
        assert "to stdout" in captured.out
        assert "to stderr" not in captured.out
        assert "to stderr" in captured.err
        assert "file only" not in captured.out + captured.err

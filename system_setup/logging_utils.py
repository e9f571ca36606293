from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import IO, Optional

# Extra levels between INFO (20) and WARNING (30), so they show with INFO.
SKIP = 21
DRY_RUN = 22
SECTION = 23
SUCCESS = 25

logging.addLevelName(SKIP, "SKIP")
logging.addLevelName(DRY_RUN, "DRY_RUN")
logging.addLevelName(SECTION, "SECTION")
logging.addLevelName(SUCCESS, "SUCCESS")

LINE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RED = "\033[0;31m"
_GREEN = "\033[0;32m"
_YELLOW = "\033[1;33m"
_BLUE = "\033[0;34m"
_CYAN = "\033[0;36m"
_GRAY = "\033[0;90m"
_NC = "\033[0m"

_RULE = "━" * 60


def run_log_name(now: Optional[float] = None) -> str:
    return time.strftime("setup-%Y%m%d-%H%M%S.log", time.localtime(now))


class ConsoleFormatter(logging.Formatter):
    """Short, colored console lines; the file keeps the full format."""

    _PREFIX = {
        logging.DEBUG: (_GRAY, "[.]"),
        logging.INFO: (_BLUE, "[*]"),
        SKIP: (_GRAY, "[−]"),
        DRY_RUN: (_CYAN, "[DRY]"),
        SUCCESS: (_GREEN, "[✓]"),
        logging.WARNING: (_YELLOW, "[!]"),
        logging.ERROR: (_RED, "[✗]"),
        logging.CRITICAL: (_RED, "[✗]"),
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__("%(message)s")
        self.use_colors = use_colors

    def _c(self, color: str, text: str) -> str:
        return f"{color}{text}{_NC}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if record.levelno == SECTION:
            return "\n".join(["", self._c(_CYAN, _RULE), self._c(_CYAN, f"  {msg}"), self._c(_CYAN, _RULE), ""])
        color, prefix = self._PREFIX.get(record.levelno, (_BLUE, "[*]"))
        if record.levelno == DRY_RUN:
            return f"{self._c(color, prefix)} Would: {msg}"
        if record.levelno == SKIP:
            return f"{self._c(color, prefix)} {msg} {self._c(_GRAY, '(already installed)')}"
        return f"{self._c(color, prefix)} {msg}"


class _BelowLevel(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def _wants_color(stream: IO[str]) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    log_dir: str = ".",
    level: int = logging.DEBUG,
    also_console: bool = True,
    log_name: Optional[str] = None,
) -> str:
    """Configure logging for one run.

    - One log file per run, setup-YYYYmmdd-HHMMSS.log under log_dir, opened
      before the first step and appended to by the main flow only.
    - Console mirror: INFO and above, colored when attached to a terminal.
      ERROR goes to stderr, everything else to stdout.

    Calling it again replaces the handlers installed by the previous call.

    Returns the log file path.
    """

    root = logging.getLogger()
    root.setLevel(level)

    for h in getattr(root, "_system_setup_handlers", []):
        root.removeHandler(h)
        h.close()

    log_path = Path(log_dir).expanduser() / (log_name or run_log_name())
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = []

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(fmt=LINE_FORMAT, datefmt=DATE_FORMAT))
    handlers.append(file_handler)

    if also_console:
        out = logging.StreamHandler(sys.stdout)
        out.setLevel(logging.INFO)
        out.addFilter(_BelowLevel(logging.ERROR))
        out.setFormatter(ConsoleFormatter(use_colors=_wants_color(sys.stdout)))
        handlers.append(out)

        err = logging.StreamHandler(sys.stderr)
        err.setLevel(logging.ERROR)
        err.setFormatter(ConsoleFormatter(use_colors=_wants_color(sys.stderr)))
        handlers.append(err)

    for h in handlers:
        root.addHandler(h)

    setattr(root, "_system_setup_handlers", handlers)
    setattr(root, "_system_setup_log_path", str(log_path))

    logging.getLogger(__name__).info("Log file: %s", log_path)
    return str(log_path)

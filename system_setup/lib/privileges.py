from __future__ import annotations

import logging
import subprocess
import threading
from typing import Optional

from ..errors import PreconditionFailure
from .command import is_root, run_cmd

logger = logging.getLogger(__name__)

KEEPALIVE_INTERVAL_S = 60.0


def acquire_sudo() -> None:
    """Prompt for sudo once up front so later steps run unattended."""

    if is_root():
        return
    try:
        r = run_cmd(["sudo", "-v"], check=False, capture=False)
    except FileNotFoundError as e:
        raise PreconditionFailure("sudo is not installed") from e
    if not r.ok:
        raise PreconditionFailure("Failed to obtain sudo privileges")


class SudoKeepAlive:
    """Refresh cached sudo credentials in the background.

    Long steps (upgrades, large installers) would otherwise hit the sudo
    timeout and prompt mid-run. The thread touches no shared state.
    """

    def __init__(self, interval_s: float = KEEPALIVE_INTERVAL_S) -> None:
        self.interval_s = interval_s
        self.refreshes = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running or is_root():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="sudo-keepalive", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=2)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                subprocess.run(
                    ["sudo", "-n", "true"],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
                self.refreshes += 1
            except OSError:
                logger.debug("sudo keep-alive refresh failed", exc_info=True)

    def __enter__(self) -> "SudoKeepAlive":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def is_root() -> bool:
    return os.geteuid() == 0


def privileged(argv: Sequence[str], *, preserve_env: bool = False) -> list[str]:
    """Prefix argv with sudo unless we already run as root."""
    if is_root():
        return list(argv)
    prefix = ["sudo", "-E"] if preserve_env else ["sudo"]
    return [*prefix, *argv]


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    sudo: bool = False,
    preserve_env: bool = False,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - sudo=True runs it through sudo (skipped when already root).
    - capture=False lets the command talk to the terminal directly; used for
      installers that prompt the user.
    - dry_run logs but does not execute.

    No timeout is applied: a hung installer blocks the run.
    """

    argv_list = privileged(argv, preserve_env=preserve_env) if sudo else list(argv)
    logger.debug("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    pipe = subprocess.PIPE if capture else None
    p = subprocess.run(
        argv_list,
        input=input_text,
        text=True,
        stdout=pipe,
        stderr=pipe,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandFailed(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def query_cmd(argv: Sequence[str]) -> CmdResult | None:
    """Run a read-only query; None when the tool itself is missing."""
    try:
        return run_cmd(argv, check=False)
    except FileNotFoundError:
        logger.debug("Query tool not found: %s", argv[0])
        return None


def launch_briefly(argv: Sequence[str], seconds: float) -> bool:
    """Start a GUI program, let it initialize, then close it.

    Returns False if the program had already exited on its own.
    """

    logger.debug("LAUNCH %s", _fmt_argv(argv))
    proc = subprocess.Popen(list(argv), stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    logger.info("%s started with PID: %s", argv[0], proc.pid)
    time.sleep(seconds)
    if proc.poll() is not None:
        return False
    proc.terminate()
    proc.wait()
    return True

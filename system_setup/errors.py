from __future__ import annotations

import shlex
from typing import Optional, Sequence


class SetupError(Exception):
    """Base class for every error raised by system-setup."""


class PreconditionFailure(SetupError):
    """The run cannot start (e.g. sudo credentials could not be obtained)."""


class StepAborted(SetupError):
    """A step marked fatal failed; the remaining steps must not run."""

    def __init__(self, step: str, reason: str) -> None:
        super().__init__(f"{step}: {reason}")
        self.step = step
        self.reason = reason


class CatalogError(SetupError, ValueError):
    """The software catalog is missing or malformed."""


class MissingArtifact(SetupError):
    """A locally staged installer payload could not be found."""

    def __init__(self, pattern: str, directory: str, hint: Optional[str] = None) -> None:
        msg = f"no file matching {pattern!r} in {directory}"
        if hint:
            msg += f" (download from {hint})"
        super().__init__(msg)
        self.pattern = pattern
        self.directory = directory
        self.hint = hint


class CommandFailed(SetupError):
    """An external command exited non-zero."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        cmd = " ".join(shlex.quote(a) for a in self.argv)
        msg = f"Command failed ({returncode}): {cmd}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)

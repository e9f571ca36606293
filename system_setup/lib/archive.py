from __future__ import annotations

import logging
from pathlib import Path

from ..logging_utils import SKIP, SUCCESS
from .command import run_cmd

logger = logging.getLogger(__name__)


def extract_archive(archive: str | Path, dest: str | Path, *, strip_components: int = 1) -> None:
    d = Path(dest).expanduser()
    d.mkdir(parents=True, exist_ok=True)
    logger.info("Extracting %s to %s...", Path(archive).name, d)
    run_cmd(["tar", "-xzf", str(archive), "-C", str(d), f"--strip-components={strip_components}"])


def ensure_path_entry(rc_file: str | Path, bin_dir: str, *, label: str) -> bool:
    """Append an `export PATH=...` line to a shell rc file once.

    bin_dir is written relative to ${HOME} when it lives under it.
    Returns True when the file was modified.
    """

    rc = Path(rc_file).expanduser()
    home = Path.home()
    target = Path(bin_dir).expanduser()
    try:
        shown = "${HOME}/" + str(target.relative_to(home))
        marker = str(target.relative_to(home))
    except ValueError:
        shown = marker = str(target)

    try:
        existing = rc.read_text(encoding="utf-8")
    except FileNotFoundError:
        existing = ""

    if marker in existing:
        logger.log(SKIP, "%s PATH entry", label)
        return False

    logger.info("Adding %s to PATH in %s...", label, rc.name)
    with rc.open("a", encoding="utf-8") as f:
        f.write(f'\n# {label}\nexport PATH="{shown}:${{PATH}}"\n')
    logger.log(SUCCESS, "Added %s to PATH", label)
    return True


def run_bundle(bundle: str | Path) -> None:
    """Run a self-extracting vendor installer (.bundle) as root.

    The installer may prompt (EULA), so it keeps the terminal. It is run
    through sh, so the staged file is never made executable.
    """

    path = Path(bundle).resolve()
    logger.info("Running installer %s...", path.name)
    run_cmd(["sh", str(path)], sudo=True, capture=False)

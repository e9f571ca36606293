from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..logging_utils import SKIP, SUCCESS
from .command import run_cmd
from .probe import package_installed

logger = logging.getLogger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def apt_update() -> None:
    logger.info("Updating package lists...")
    run_cmd(["apt-get", "update", "-qq"], sudo=True)
    logger.log(SUCCESS, "Package lists updated")


def apt_upgrade() -> None:
    logger.info("Upgrading installed packages...")
    run_cmd(["apt-get", "upgrade", "-y"], sudo=True, preserve_env=True, env=_APT_ENV)
    logger.log(SUCCESS, "Packages upgraded")


def apt_install(packages: Sequence[str]) -> list[str]:
    """Install whichever of packages are not installed yet.

    Returns the packages that were actually installed.
    """

    todo: list[str] = []
    for p in packages:
        if package_installed(p):
            logger.log(SKIP, "%s", p)
        else:
            todo.append(p)

    if not todo:
        return []

    logger.info("Installing packages: %s", " ".join(todo))
    run_cmd(["apt-get", "install", "-y", *todo], sudo=True, preserve_env=True, env=_APT_ENV)
    logger.log(SUCCESS, "Packages installed: %s", " ".join(todo))
    return todo


def apt_install_deb(deb_file: str | Path) -> None:
    # apt needs a path, not a bare filename, to treat the argument as a file.
    path = str(Path(deb_file).resolve())
    logger.info("Installing %s from .deb file...", Path(path).name)
    run_cmd(["apt-get", "install", "-y", path], sudo=True, preserve_env=True, env=_APT_ENV)


def dpkg_architecture() -> str:
    return run_cmd(["dpkg", "--print-architecture"]).stdout.strip()

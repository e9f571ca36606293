from __future__ import annotations

import logging
import os

from ..logging_utils import SUCCESS
from .command import run_cmd

logger = logging.getLogger(__name__)

N_PREFIX_BIN = "/usr/local/bin"


def npm_install_global(package: str) -> None:
    logger.info("Installing npm package: %s...", package)
    run_cmd(["npm", "install", "-g", package], sudo=True)
    logger.log(SUCCESS, "%s installed", package)


def n_install_version(version: str) -> None:
    """Activate an exact Node.js version through the `n` version manager."""

    logger.info("Installing Node.js %s using 'n'...", version)
    run_cmd(["n", version], sudo=True)

    # n installs into /usr/local; make sure later steps in this process see it first.
    path = os.environ.get("PATH", "")
    if not path.startswith(N_PREFIX_BIN + os.pathsep):
        os.environ["PATH"] = N_PREFIX_BIN + os.pathsep + path
    logger.log(SUCCESS, "Node.js %s installed", version)

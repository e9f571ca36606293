from __future__ import annotations

import logging

from ..logging_utils import SUCCESS
from .command import run_cmd

logger = logging.getLogger(__name__)


def flatpak_remote_add(name: str, url: str) -> None:
    logger.info("Adding %s repository...", name)
    run_cmd(["flatpak", "remote-add", "--if-not-exists", name, url], sudo=True)
    logger.log(SUCCESS, "%s repository configured", name)


def flatpak_install(app_id: str, *, remote: str = "flathub", name: str | None = None) -> None:
    label = name or app_id
    logger.info("Installing Flatpak: %s...", label)
    run_cmd(["flatpak", "install", "-y", "--noninteractive", remote, app_id])
    logger.log(SUCCESS, "%s installed", label)

from __future__ import annotations

import logging
from typing import List, Optional

from ..catalog import Catalog, FlatpakApp
from ..config import StepContext
from ..lib import probe
from ..lib.flatpak import flatpak_install, flatpak_remote_add
from ..lib.pkg import apt_install
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)


def _flatpak_gate(ctx: StepContext) -> Optional[str]:
    return None if ctx.config.install_flatpak else "disabled"


def _app_gate(ctx: StepContext) -> Optional[str]:
    if not ctx.config.install_flatpak:
        return "disabled"
    # In a dry run the Flatpak step above only pretended, so flatpak may legitimately be absent.
    if not ctx.dry_run and not probe.command_exists("flatpak"):
        return "flatpak not available"
    return None


def flatpak_setup_steps(catalog: Catalog) -> List[StepDescriptor]:
    packages = catalog.flatpak_packages
    remote = catalog.flatpak_remote_name
    url = catalog.flatpak_remote_url

    def _probe(ctx: StepContext) -> bool:
        return (
            probe.command_exists("flatpak")
            and probe.packages_installed(packages)
            and probe.flatpak_remote_exists(remote)
        )

    def _apply(ctx: StepContext) -> StepResult:
        fresh = not probe.command_exists("flatpak")
        apt_install(packages)
        if not probe.flatpak_remote_exists(remote):
            flatpak_remote_add(remote, url)
        # Flatpak apps may not work correctly until the session is restarted.
        return StepResult.installed(reboot_recommended=fresh)

    return [
        StepDescriptor(
            name="Flatpak",
            section="Flatpak Setup",
            gate=_flatpak_gate,
            probe=_probe,
            apply=_apply,
            describe=lambda ctx: f"apt install {' '.join(packages)} && flatpak remote-add {remote}",
        )
    ]


def _app_step(app: FlatpakApp, remote: str) -> StepDescriptor:
    def _apply(ctx: StepContext) -> StepResult:
        flatpak_install(app.app_id, remote=remote, name=app.name)
        return StepResult.installed()

    return StepDescriptor(
        name=f"Flatpak: {app.name}",
        section="Flatpak Apps",
        gate=_app_gate,
        probe=lambda ctx: probe.flatpak_installed(app.app_id),
        apply=_apply,
        describe=lambda ctx: f"flatpak install {remote} {app.app_id}",
    )


def flatpak_app_steps(catalog: Catalog) -> List[StepDescriptor]:
    remote = catalog.flatpak_remote_name
    return [_app_step(app, remote) for app in catalog.flatpak_apps]

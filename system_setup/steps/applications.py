"""Vendor applications that do not come from the distro archive.

Each catalog entry has a `kind` that picks the installer strategy:

    script       curl URL | sh                       (Brave)
    deb          local .deb from the artifacts dir    (Slack, Cursor)
    signed_repo  keyring + apt source (+ debsig)     (1Password)
    archive      tarball into a user dir + PATH       (JetBrains Toolbox)
    bundle       self-extracting installer, as root   (VMware)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List

from ..catalog import Application, Catalog
from ..config import StepContext
from ..errors import CatalogError
from ..lib import probe
from ..lib.apt_repo import add_signed_repository, install_debsig_policy, run_remote_script
from ..lib.archive import ensure_path_entry, extract_archive, run_bundle
from ..lib.artifacts import require_artifact
from ..lib.command import launch_briefly
from ..lib.pkg import apt_install, apt_install_deb, apt_update, dpkg_architecture
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)

_DEBSIG_KEYS = ("policy_dir", "policy_url", "keyring_dir")


def _present(app: Application) -> bool:
    if app.commands and probe.any_command_exists(app.commands):
        return True
    return bool(app.package) and probe.package_installed(app.package)


def _artifact(app: Application, ctx: StepContext) -> Path:
    return require_artifact(ctx.config.artifacts_dir, app.require("artifact"), hint=app.get("download"))


# --- script -----------------------------------------------------------------


def _script_step(app: Application) -> StepDescriptor:
    url = app.require("url")

    def _apply(ctx: StepContext) -> StepResult:
        logger.info("Installing %s...", app.title)
        run_remote_script(url)
        return StepResult.installed()

    return StepDescriptor(
        name=app.title,
        section=app.title,
        probe=lambda ctx: _present(app),
        apply=_apply,
        describe=lambda ctx: f"Install {app.title} via install script {url}",
    )


# --- deb --------------------------------------------------------------------


def _deb_step(app: Application) -> StepDescriptor:
    app.require("artifact")

    def _apply(ctx: StepContext) -> StepResult:
        apt_install_deb(_artifact(app, ctx))
        return StepResult.installed()

    return StepDescriptor(
        name=app.title,
        section=app.title,
        probe=lambda ctx: _present(app),
        apply=_apply,
        describe=lambda ctx: f"apt install {_artifact(app, ctx)}",
    )


# --- signed_repo -------------------------------------------------------------


def _signed_repo_step(app: Application) -> StepDescriptor:
    package = app.package or app.id
    key_url = app.require("key_url")
    keyring = app.require("keyring")
    sources_file = app.require("sources_file")
    repo = app.require("repo")
    debsig = app.get("debsig") or {}
    if debsig:
        if not isinstance(debsig, dict):
            raise CatalogError(f"application {app.id}: 'debsig' must be a mapping")
        for key in _DEBSIG_KEYS:
            if not debsig.get(key):
                raise CatalogError(f"application {app.id}: 'debsig.{key}' is required")

    def _apply(ctx: StepContext) -> StepResult:
        arch = dpkg_architecture()
        add_signed_repository(
            sources_file=sources_file,
            line=repo.format(arch=arch, keyring=keyring),
            key_url=key_url,
            keyring=keyring,
        )
        if debsig:
            install_debsig_policy(
                policy_dir=debsig["policy_dir"],
                policy_url=debsig["policy_url"],
                keyring_dir=debsig["keyring_dir"],
                key_url=key_url,
            )
        apt_update()
        apt_install([package])
        return StepResult.installed()

    return StepDescriptor(
        name=app.title,
        section=app.title,
        probe=lambda ctx: probe.package_installed(package),
        apply=_apply,
        describe=lambda ctx: f"Install {app.title} (add GPG key, repository and install {package})",
    )


# --- archive -----------------------------------------------------------------


def _archive_step(app: Application) -> StepDescriptor:
    app.require("artifact")
    install_dir = str(app.require("install_dir"))
    binary = app.get("binary")
    rc_file = app.get("path_rc")
    launch_seconds = float(app.get("launch_seconds") or 0)
    deps = [str(d) for d in app.get("dependencies") or []]

    def _probe(ctx: StepContext) -> bool:
        if probe.any_command_exists(app.commands):
            return True
        target = Path(install_dir).expanduser()
        # A failed extraction leaves the directory behind; only the binary proves success.
        if binary:
            return (target / binary).is_file()
        return target.is_dir() and any(target.iterdir())

    def _apply(ctx: StepContext) -> StepResult:
        archive = _artifact(app, ctx)
        if deps:
            logger.info("Checking %s dependencies...", app.title)
            apt_install(deps)

        target = Path(install_dir).expanduser()
        extract_archive(archive, target)

        if binary:
            exe = target / binary
            if rc_file:
                ensure_path_entry(rc_file, str(exe.parent), label=app.title)
            # First launch lets the app finish its own self-install.
            if launch_seconds > 0 and exe.exists():
                if launch_briefly([str(exe)], launch_seconds):
                    logger.info("Closed %s after %g seconds", app.title, launch_seconds)
                else:
                    logger.warning("%s already exited", app.title)

        logger.info("%s installed to %s", app.title, target)
        return StepResult.installed()

    def _describe(ctx: StepContext) -> str:
        archive = _artifact(app, ctx)
        return f"Extract {archive.name} to {install_dir} and add to PATH"

    return StepDescriptor(
        name=app.title,
        section=app.title,
        probe=_probe,
        apply=_apply,
        describe=_describe,
    )


# --- bundle ------------------------------------------------------------------


def _bundle_step(app: Application) -> StepDescriptor:
    app.require("artifact")

    def _apply(ctx: StepContext) -> StepResult:
        bundle = _artifact(app, ctx)
        logger.info("Installing %s from %s...", app.title, bundle)
        run_bundle(bundle)
        return StepResult.installed()

    return StepDescriptor(
        name=app.title,
        section=app.title,
        probe=lambda ctx: _present(app),
        apply=_apply,
        describe=lambda ctx: f"Install {app.title} from {_artifact(app, ctx)}",
    )


_FACTORIES: Dict[str, Callable[[Application], StepDescriptor]] = {
    "script": _script_step,
    "deb": _deb_step,
    "signed_repo": _signed_repo_step,
    "archive": _archive_step,
    "bundle": _bundle_step,
}


def application_steps(catalog: Catalog, *, after_flatpak_apps: bool = False) -> List[StepDescriptor]:
    """Steps for the applications in one of the two slots of the run.

    Entries flagged `after_flatpak_apps` (JetBrains Toolbox, VMware) run
    once the Flatpak apps are in; the rest run before them.
    """
    return [
        _FACTORIES[app.kind](app)
        for app in catalog.applications
        if bool(app.get("after_flatpak_apps")) == after_flatpak_apps
    ]

"""Read-only probes answering "is the desired end state already there?".

None of these mutate the host. A missing query tool (no dpkg-query, no
flatpak, no npm...) means "not installed", never an error.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from .command import query_cmd

logger = logging.getLogger(__name__)

APT_SOURCES_DIR = Path("/etc/apt/sources.list.d")


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def any_command_exists(names: Iterable[str]) -> bool:
    return any(command_exists(n) for n in names)


def package_installed(pkg: str) -> bool:
    r = query_cmd(["dpkg-query", "-W", "-f=${Status}", pkg])
    return r is not None and "install ok installed" in r.stdout


def packages_installed(pkgs: Iterable[str]) -> bool:
    return all(package_installed(p) for p in pkgs)


def missing_packages(pkgs: Iterable[str]) -> list[str]:
    return [p for p in pkgs if not package_installed(p)]


def file_exists(path: str | Path) -> bool:
    return Path(path).expanduser().is_file()


def line_in_file(path: str | Path, needle: str) -> bool:
    p = Path(path).expanduser()
    try:
        return needle in p.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return False


def apt_repo_registered(identifier: str, sources_dir: str | Path | None = None) -> bool:
    """True if any apt source file mentions identifier.

    identifier is e.g. "system76-dev/stable" for ppa:system76-dev/stable.
    Both one-line (*.list) and deb822 (*.sources) files are searched.
    """

    d = Path(sources_dir) if sources_dir is not None else APT_SOURCES_DIR
    if not d.is_dir():
        return False
    for p in sorted(d.iterdir()):
        if p.suffix not in {".list", ".sources"}:
            continue
        if line_in_file(p, identifier):
            return True
    return False


def flatpak_installed(app_id: str) -> bool:
    r = query_cmd(["flatpak", "list", "--app", "--columns=application"])
    if r is None or not r.ok:
        return False
    return app_id in {ln.strip() for ln in r.stdout.splitlines()}


def flatpak_remote_exists(name: str) -> bool:
    r = query_cmd(["flatpak", "remotes", "--columns=name"])
    if r is None or not r.ok:
        return False
    return name in {ln.strip() for ln in r.stdout.splitlines()}


def npm_global_installed(pkg: str) -> bool:
    r = query_cmd(["npm", "list", "-g", "--depth=0", pkg])
    return r is not None and r.ok


def node_version() -> Optional[str]:
    if not command_exists("node"):
        return None
    r = query_cmd(["node", "--version"])
    if r is None or not r.ok:
        return None
    return r.stdout.strip().lstrip("v") or None


def gsetting_value(schema: str, key: str) -> Optional[str]:
    r = query_cmd(["gsettings", "get", schema, key])
    if r is None or not r.ok:
        return None
    return r.stdout.strip()


def gsetting_matches(schema: str, key: str, value: str) -> bool:
    return gsetting_value(schema, key) == value.strip()


def no_pending_upgrades() -> bool:
    """True when apt's cached lists report nothing to upgrade."""
    r = query_cmd(["apt", "list", "--upgradable"])
    if r is None or not r.ok:
        return False
    pending = [ln for ln in r.stdout.splitlines() if "/" in ln and "[upgradable" in ln]
    return not pending

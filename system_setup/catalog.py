"""Software catalog: which packages, repositories and apps a run provisions.

The catalog is data. Step code reads it through the accessors below and never
hardcodes package names, URLs or key locations.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import CatalogError

DEFAULT_CATALOG = Path(__file__).resolve().parent / "manifests" / "catalog.yaml"

APP_KINDS = {"script", "deb", "signed_repo", "archive", "bundle"}
REQUIRED_SECTIONS = ("bootstrap", "system76", "flatpak", "tools", "node", "applications")


@dataclass(frozen=True)
class FlatpakApp:
    app_id: str
    name: str


@dataclass(frozen=True)
class Tool:
    """A CLI tool installed straight from the distro archive."""

    id: str
    title: str
    packages: List[str]
    commands: List[str]
    post_install: List[List[str]]


@dataclass(frozen=True)
class DesktopSetting:
    schema: str
    key: str
    value: str

    @property
    def title(self) -> str:
        return f"{self.schema} {self.key}"


@dataclass(frozen=True)
class Application:
    """A vendor application; `kind` selects the installer strategy."""

    id: str
    title: str
    kind: str
    commands: List[str]
    package: Optional[str]
    raw: Dict[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    def require(self, key: str) -> Any:
        v = self.raw.get(key)
        if v in (None, "", []):
            raise CatalogError(f"application {self.id}: '{key}' is required for kind {self.kind}")
        return v


def _str_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise CatalogError(f"{where} must be a list")
    return [str(v).strip() for v in value if str(v).strip()]


@dataclass(frozen=True)
class Catalog:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def bootstrap_packages(self) -> List[str]:
        return _str_list(self._section("bootstrap").get("packages"), "bootstrap.packages")

    @property
    def system76_ppa(self) -> str:
        return str(self._section("system76").get("ppa") or "ppa:system76-dev/stable")

    @property
    def system76_packages(self) -> List[str]:
        return _str_list(self._section("system76").get("packages"), "system76.packages")

    @property
    def system76_nvidia_packages(self) -> List[str]:
        return _str_list(self._section("system76").get("nvidia_packages"), "system76.nvidia_packages")

    @property
    def flatpak_packages(self) -> List[str]:
        return _str_list(self._section("flatpak").get("packages"), "flatpak.packages")

    @property
    def flatpak_remote_name(self) -> str:
        return str((self._section("flatpak").get("remote") or {}).get("name") or "flathub")

    @property
    def flatpak_remote_url(self) -> str:
        return str(
            (self._section("flatpak").get("remote") or {}).get("url")
            or "https://dl.flathub.org/repo/flathub.flatpakrepo"
        )

    @property
    def flatpak_apps(self) -> List[FlatpakApp]:
        apps = self._section("flatpak").get("apps") or []
        if not isinstance(apps, list):
            raise CatalogError("flatpak.apps must be a list")
        out: List[FlatpakApp] = []
        for a in apps:
            if isinstance(a, str):
                out.append(FlatpakApp(app_id=a, name=a))
            elif isinstance(a, dict) and a.get("id"):
                out.append(FlatpakApp(app_id=str(a["id"]), name=str(a.get("name") or a["id"])))
            else:
                raise CatalogError(f"flatpak.apps entry needs an id: {a!r}")
        return out

    @property
    def tools(self) -> List[Tool]:
        tools = self.raw.get("tools") or []
        if not isinstance(tools, list):
            raise CatalogError("tools must be a list")
        out: List[Tool] = []
        for t in tools:
            if not isinstance(t, dict) or not t.get("id"):
                raise CatalogError(f"tools entry needs an id: {t!r}")
            tid = str(t["id"])
            packages = _str_list(t.get("packages"), f"tools.{tid}.packages") or [tid]
            post = t.get("post_install") or []
            if not isinstance(post, list) or not all(isinstance(c, list) for c in post):
                raise CatalogError(f"tools.{tid}.post_install must be a list of argv lists")
            out.append(
                Tool(
                    id=tid,
                    title=str(t.get("title") or tid),
                    packages=packages,
                    commands=_str_list(t.get("commands"), f"tools.{tid}.commands"),
                    post_install=[[str(a) for a in c] for c in post],
                )
            )
        return out

    @property
    def node_version(self) -> str:
        v = self._section("node").get("version")
        if not v:
            raise CatalogError("node.version is required")
        return str(v).lstrip("v")

    @property
    def node_setup_script(self) -> str:
        return str(self._section("node").get("setup_script") or "https://deb.nodesource.com/setup_lts.x")

    @property
    def node_sources_file(self) -> str:
        return str(self._section("node").get("sources_file") or "/etc/apt/sources.list.d/nodesource.list")

    @property
    def npm_packages(self) -> List[str]:
        return _str_list(self._section("node").get("npm_packages"), "node.npm_packages")

    @property
    def applications(self) -> List[Application]:
        apps = self.raw.get("applications") or []
        if not isinstance(apps, list):
            raise CatalogError("applications must be a list")
        out: List[Application] = []
        for a in apps:
            if not isinstance(a, dict) or not a.get("id"):
                raise CatalogError(f"applications entry needs an id: {a!r}")
            aid = str(a["id"])
            kind = str(a.get("kind") or "")
            if kind not in APP_KINDS:
                raise CatalogError(f"application {aid}: unknown kind {kind!r}")
            out.append(
                Application(
                    id=aid,
                    title=str(a.get("title") or aid),
                    kind=kind,
                    commands=_str_list(a.get("commands"), f"applications.{aid}.commands"),
                    package=str(a["package"]) if a.get("package") else None,
                    raw=dict(a),
                )
            )
        return out

    @property
    def desktop_settings(self) -> List[DesktopSetting]:
        items = self.raw.get("desktop_settings") or []
        if not isinstance(items, list):
            raise CatalogError("desktop_settings must be a list")
        out: List[DesktopSetting] = []
        for s in items:
            if not isinstance(s, dict) or not all(s.get(k) not in (None, "") for k in ("schema", "key", "value")):
                raise CatalogError(f"desktop_settings entry needs schema, key and value: {s!r}")
            out.append(DesktopSetting(schema=str(s["schema"]), key=str(s["key"]), value=str(s["value"])))
        return out

    def validate(self) -> "Catalog":
        """Touch every accessor so a malformed catalog fails before any step runs."""
        for name in REQUIRED_SECTIONS:
            if name not in self.raw:
                raise CatalogError(f"catalog is missing section '{name}'")
        _ = (
            self.bootstrap_packages,
            self.system76_packages,
            self.system76_nvidia_packages,
            self.flatpak_packages,
            self.flatpak_apps,
            self.tools,
            self.node_version,
            self.npm_packages,
            self.applications,
            self.desktop_settings,
        )
        return self


def load_catalog(path: str | Path | None = None) -> Catalog:
    p = Path(path) if path else DEFAULT_CATALOG
    if not p.exists():
        raise CatalogError(f"catalog not found: {p}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise CatalogError("catalog must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the catalog") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise CatalogError(f"{p}: {e}") from e
    if not isinstance(raw, dict):
        raise CatalogError(f"{p} must contain a mapping/object")

    return Catalog(raw=raw).validate()

"""
Shared test fixtures: an in-memory host standing in for apt, flatpak, npm...

Every external command goes through subprocess.run inside
system_setup.lib.command, and every PATH lookup through shutil.which, so
patching those two is enough to keep tests off the real machine.
"""

import logging
import subprocess
import textwrap
from pathlib import Path

import pytest

from system_setup.catalog import load_catalog
from system_setup.config import RunConfig, StepContext
from system_setup.lib import probe
from system_setup.steps import system76 as system76_steps

# Commands a package makes available once installed.
PACKAGE_COMMANDS = {
    "curl": ["curl"],
    "git": ["git"],
    "git-lfs": ["git-lfs"],
    "flatpak": ["flatpak"],
    "nodejs": ["node", "npm"],
    "1password": ["1password"],
}

MUTATING = {
    ("apt-get", "install"),
    ("apt-get", "upgrade"),
    ("apt-get", "update"),
    ("apt-add-repository", None),
    ("flatpak", "install"),
    ("flatpak", "remote-add"),
    ("npm", "install"),
    ("n", None),
    ("gsettings", "set"),
    ("git", "lfs"),
    ("tee", None),
    ("gpg", None),
    ("bash", None),
    ("sh", None),
    ("tar", None),
    ("mkdir", None),
}


class FakeHost:
    def __init__(self, root: Path):
        self.root = root
        self.sources_dir = root / "sources.list.d"
        self.sources_dir.mkdir()
        self.commands = {"dpkg-query", "apt", "apt-get", "sudo", "gsettings", "lspci"}
        self.packages = set()
        self.flatpaks = set()
        self.remotes = set()
        self.npm_globals = set()
        self.node_version = None
        self.gsettings = {}
        self.upgradable = ["libfoo/jammy-updates 1.1 amd64 [upgradable from: 1.0]"]
        self.missing_tools = set()
        self.failing = set()
        self.sudo_ok = True
        self.calls = []

    # -- state helpers ------------------------------------------------------

    def install_package(self, pkg):
        self.packages.add(pkg)
        self.commands.update(PACKAGE_COMMANDS.get(pkg, []))
        if pkg == "nodejs" and self.node_version is None:
            self.node_version = "18.19.0"

    @property
    def mutations(self):
        out = []
        for argv in self.calls:
            cmd = self._strip_sudo(argv)
            if not cmd:
                continue
            sub = cmd[1] if len(cmd) > 1 else None
            if (cmd[0], sub) in MUTATING or (cmd[0], None) in MUTATING:
                out.append(cmd)
        return out

    @staticmethod
    def _strip_sudo(argv):
        cmd = list(argv)
        if cmd and cmd[0] == "sudo":
            cmd = cmd[1:]
            if cmd and cmd[0] == "-E":
                cmd = cmd[1:]
        return cmd

    # -- fakes ---------------------------------------------------------------

    def which(self, name, *args, **kwargs):
        return f"/usr/bin/{name}" if name in self.commands else None

    def run(self, argv, input=None, text=None, stdout=None, stderr=None, cwd=None, env=None, **kwargs):
        argv = list(argv)
        self.calls.append(argv)

        if argv[:2] == ["sudo", "-v"] or argv[:2] == ["sudo", "-n"]:
            return self._done(argv, 0 if self.sudo_ok else 1)

        cmd = self._strip_sudo(argv)
        name = cmd[0]
        if name in self.missing_tools:
            raise FileNotFoundError(2, "No such file or directory", name)
        if name in self.failing or " ".join(cmd) in self.failing:
            return self._done(argv, 100, stderr="E: simulated failure")

        handler = getattr(self, "_cmd_" + name.replace("-", "_"), None)
        if handler is None:
            return self._done(argv, 0)
        return handler(argv, cmd, input)

    def _done(self, argv, rc, stdout="", stderr=""):
        return subprocess.CompletedProcess(argv, rc, stdout, stderr)

    def _cmd_dpkg_query(self, argv, cmd, input):
        pkg = cmd[-1]
        if pkg in self.packages:
            return self._done(argv, 0, "install ok installed")
        return self._done(argv, 1, stderr=f"dpkg-query: no packages found matching {pkg}")

    def _cmd_dpkg(self, argv, cmd, input):
        return self._done(argv, 0, "amd64\n")

    def _cmd_apt(self, argv, cmd, input):
        lines = ["Listing..."] + self.upgradable
        return self._done(argv, 0, "\n".join(lines) + "\n")

    def _cmd_apt_get(self, argv, cmd, input):
        if cmd[1] == "upgrade":
            self.upgradable = []
        elif cmd[1] == "install":
            for pkg in cmd[3:]:
                if pkg in self.failing:
                    return self._done(argv, 100, stderr=f"E: Unable to locate package {pkg}")
                if pkg.endswith(".deb"):
                    pkg = Path(pkg).name.split("_")[0].split("-amd64")[0]
                self.install_package(pkg)
        return self._done(argv, 0)

    def _cmd_apt_add_repository(self, argv, cmd, input):
        ppa = cmd[-1].split(":", 1)[1]
        (self.sources_dir / (ppa.replace("/", "-") + ".list")).write_text(
            f"deb https://ppa.launchpadcontent.net/{ppa}/ubuntu jammy main\n"
        )
        return self._done(argv, 0)

    def _cmd_flatpak(self, argv, cmd, input):
        if cmd[1] == "list":
            return self._done(argv, 0, "".join(a + "\n" for a in sorted(self.flatpaks)))
        if cmd[1] == "remotes":
            return self._done(argv, 0, "".join(r + "\n" for r in sorted(self.remotes)))
        if cmd[1] == "remote-add":
            self.remotes.add(cmd[-2])
        if cmd[1] == "install":
            self.flatpaks.add(cmd[-1])
        return self._done(argv, 0)

    def _cmd_npm(self, argv, cmd, input):
        if cmd[1] == "list":
            return self._done(argv, 0 if cmd[-1] in self.npm_globals else 1)
        if cmd[1] == "install":
            self.npm_globals.add(cmd[-1])
            if cmd[-1] == "n":
                self.commands.add("n")
        return self._done(argv, 0)

    def _cmd_n(self, argv, cmd, input):
        self.node_version = cmd[1]
        return self._done(argv, 0)

    def _cmd_node(self, argv, cmd, input):
        return self._done(argv, 0, f"v{self.node_version}\n")

    def _cmd_gsettings(self, argv, cmd, input):
        key = (cmd[2], cmd[3])
        if cmd[1] == "get":
            return self._done(argv, 0, self.gsettings.get(key, "'default'") + "\n")
        self.gsettings[key] = cmd[4]
        return self._done(argv, 0)

    def _cmd_curl(self, argv, cmd, input):
        return self._done(argv, 0, "#!/bin/sh\necho downloaded\n")

    def _cmd_tee(self, argv, cmd, input):
        path = Path(cmd[1])
        if self.root in path.parents:
            path.write_text(input or "")
        return self._done(argv, 0, input or "")

    def _cmd_gpg(self, argv, cmd, input):
        path = Path(cmd[cmd.index("--output") + 1])
        if self.root in path.parents:
            path.write_text("dearmored")
        return self._done(argv, 0)

    def _cmd_mkdir(self, argv, cmd, input):
        path = Path(cmd[-1])
        if self.root in path.parents:
            path.mkdir(parents=True, exist_ok=True)
        return self._done(argv, 0)


@pytest.fixture
def host(tmp_path, monkeypatch) -> FakeHost:
    """Patch process spawning and PATH lookup onto a FakeHost."""
    h = FakeHost(tmp_path)
    monkeypatch.setattr("system_setup.lib.command.subprocess.run", h.run)
    monkeypatch.setattr("system_setup.lib.command.os.geteuid", lambda: 1000)
    monkeypatch.setattr(probe.shutil, "which", h.which)
    monkeypatch.setattr(probe, "APT_SOURCES_DIR", h.sources_dir)
    monkeypatch.setattr(system76_steps, "is_system76_hardware", lambda: False)
    monkeypatch.setattr(system76_steps, "has_nvidia_gpu", lambda: False)
    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    monkeypatch.delenv("NO_COLOR", raising=False)
    return h


SMALL_CATALOG = """\
bootstrap:
  packages: [curl]
system76:
  ppa: "ppa:system76-dev/stable"
  packages: [system76-driver]
  nvidia_packages: [system76-driver-nvidia]
flatpak:
  packages: [flatpak, gnome-software-plugin-flatpak]
  remote: {{name: flathub, url: "https://example.invalid/flathub.flatpakrepo"}}
  apps:
    - {{id: org.example.One, name: One}}
    - {{id: org.example.Two, name: Two}}
tools:
  - {{id: git, title: Git, packages: [git], commands: [git]}}
node:
  version: "20.19.5"
  sources_file: "{root}/nodesource.list"
  npm_packages: [pnpm]
applications: []
desktop_settings:
  - {{schema: org.gnome.desktop.interface, key: color-scheme, value: "'prefer-dark'"}}
"""


@pytest.fixture
def catalog_file(tmp_path) -> Path:
    p = tmp_path / "catalog.yaml"
    p.write_text(SMALL_CATALOG.format(root=tmp_path), encoding="utf-8")
    return p


@pytest.fixture
def write_catalog(tmp_path):
    """Write an arbitrary catalog body (dedented) and return its path."""

    def _write(body: str, name: str = "custom.yaml") -> Path:
        p = tmp_path / name
        p.write_text(textwrap.dedent(body), encoding="utf-8")
        return p

    return _write


@pytest.fixture
def make_ctx(tmp_path, catalog_file):
    def _make(catalog_path=None, **overrides) -> StepContext:
        cfg = RunConfig(
            catalog_path=str(catalog_path or catalog_file),
            artifacts_dir=str(tmp_path / "artifacts"),
            log_dir=str(tmp_path / "logs"),
            **overrides,
        )
        return StepContext(config=cfg, catalog=load_catalog(cfg.catalog_path))

    return _make


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers a run installed so they never outlive the captured streams."""
    yield
    root = logging.getLogger()
    for h in getattr(root, "_system_setup_handlers", []):
        root.removeHandler(h)
        h.close()
    root._system_setup_handlers = []

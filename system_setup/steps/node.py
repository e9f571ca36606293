from __future__ import annotations

import logging
from typing import List, Optional

from ..catalog import Catalog
from ..config import StepContext
from ..lib import probe
from ..lib.apt_repo import run_repo_setup_script
from ..lib.node import n_install_version, npm_install_global
from ..lib.pkg import apt_install
from ..logging_utils import SKIP, SUCCESS
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)


def node_steps(catalog: Catalog) -> List[StepDescriptor]:
    version = catalog.node_version
    sources_file = catalog.node_sources_file
    setup_script = catalog.node_setup_script

    def _probe(ctx: StepContext) -> bool:
        current = probe.node_version()
        if current is not None and current != version:
            logger.info("Current Node.js version: %s, target: %s", current, version)
        return current == version and probe.command_exists("npm")

    def _apply(ctx: StepContext) -> StepResult:
        if probe.file_exists(sources_file):
            logger.log(SKIP, "NodeSource repository")
        else:
            logger.info("Adding NodeSource repository for Node.js LTS...")
            run_repo_setup_script(setup_script)
            logger.log(SUCCESS, "NodeSource repository added")

        # npm ships inside the nodesource nodejs package.
        apt_install(["nodejs"])

        if probe.command_exists("n"):
            logger.log(SKIP, "'n' Node version manager")
        else:
            npm_install_global("n")

        n_install_version(version)
        active = probe.node_version()
        if active != version:
            return StepResult.failed(f"expected Node.js {version} after install, found {active}")
        logger.log(SUCCESS, "Active Node.js version: v%s", active)
        return StepResult.installed()

    return [
        StepDescriptor(
            name=f"Node.js {version}",
            section="Node.js & npm",
            probe=_probe,
            apply=_apply,
            describe=lambda ctx: f"add NodeSource repository, apt install nodejs, npm install -g n, n {version}",
        )
    ]


def _npm_gate(ctx: StepContext) -> Optional[str]:
    if not ctx.dry_run and not probe.command_exists("npm"):
        return "npm not available"
    return None


def _npm_step(package: str) -> StepDescriptor:
    def _apply(ctx: StepContext) -> StepResult:
        npm_install_global(package)
        return StepResult.installed()

    return StepDescriptor(
        name=f"npm: {package}",
        section="NPM Global Packages",
        gate=_npm_gate,
        probe=lambda ctx: probe.npm_global_installed(package),
        apply=_apply,
        describe=lambda ctx: f"npm install -g {package}",
    )


def npm_steps(catalog: Catalog) -> List[StepDescriptor]:
    return [_npm_step(p) for p in catalog.npm_packages]

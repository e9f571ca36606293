from __future__ import annotations

import logging
from typing import List

from ..catalog import Catalog
from ..config import StepContext
from ..lib import probe
from ..lib.pkg import apt_install, apt_update, apt_upgrade
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)


def bootstrap_steps(catalog: Catalog) -> List[StepDescriptor]:
    """Packages every later step relies on (curl). Failing here aborts the run."""

    packages = catalog.bootstrap_packages
    if not packages:
        return []

    def _apply(ctx: StepContext) -> StepResult:
        apt_update()
        apt_install(packages)
        return StepResult.installed()

    return [
        StepDescriptor(
            name="Required tools (" + ", ".join(packages) + ")",
            section="Prerequisites",
            probe=lambda ctx: probe.packages_installed(packages),
            apply=_apply,
            describe=lambda ctx: "apt install " + " ".join(probe.missing_packages(packages)),
            fatal=True,
        )
    ]


def _apply_updates(ctx: StepContext) -> StepResult:
    apt_update()
    apt_upgrade()
    return StepResult.installed()


def update_steps(catalog: Catalog) -> List[StepDescriptor]:
    return [
        StepDescriptor(
            name="System updates",
            section="System Updates",
            probe=lambda ctx: probe.no_pending_upgrades(),
            apply=_apply_updates,
            describe=lambda ctx: "apt update && apt upgrade",
        )
    ]

from __future__ import annotations

import logging
from typing import List, Optional

from ..catalog import Catalog
from ..config import StepContext, System76Mode
from ..lib import probe
from ..lib.apt_repo import add_apt_repository, ppa_identifier
from ..lib.hwdetect import has_nvidia_gpu, is_system76_hardware
from ..lib.pkg import apt_install, apt_update
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)

SECTION = "System76 Drivers"


def _driver_gate(ctx: StepContext) -> Optional[str]:
    mode = ctx.config.system76
    if mode is System76Mode.SKIP:
        return "disabled"
    if mode is System76Mode.FORCE:
        return None
    logger.info("Checking for System76 hardware...")
    if not is_system76_hardware():
        return "no System76 hardware detected"
    logger.info("System76 hardware detected")
    return None


def _nvidia_gate(ctx: StepContext) -> Optional[str]:
    if not ctx.config.install_nvidia_drivers:
        return "disabled"
    if ctx.config.system76 is System76Mode.SKIP:
        return "System76 drivers disabled"
    # Even with --force-system76 the NVIDIA variant needs real System76 hardware.
    if not is_system76_hardware():
        return "not System76 hardware"
    if not has_nvidia_gpu():
        return "no NVIDIA GPU detected"
    return None


def system76_steps(catalog: Catalog) -> List[StepDescriptor]:
    ppa = catalog.system76_ppa
    packages = catalog.system76_packages
    nvidia = catalog.system76_nvidia_packages

    def _driver_probe(ctx: StepContext) -> bool:
        return probe.apt_repo_registered(ppa_identifier(ppa)) and probe.packages_installed(packages)

    def _driver_apply(ctx: StepContext) -> StepResult:
        if add_apt_repository(ppa, description="System76 PPA"):
            apt_update()
        apt_install(packages)
        return StepResult.installed()

    def _nvidia_apply(ctx: StepContext) -> StepResult:
        logger.info("NVIDIA GPU detected, installing System76 NVIDIA drivers...")
        apt_install(nvidia)
        return StepResult.installed()

    steps = [
        StepDescriptor(
            name="System76 driver",
            section=SECTION,
            gate=_driver_gate,
            probe=_driver_probe,
            apply=_driver_apply,
            describe=lambda ctx: f"apt-add-repository {ppa} && apt install {' '.join(packages)}",
        )
    ]
    if nvidia:
        steps.append(
            StepDescriptor(
                name="System76 NVIDIA driver",
                section=SECTION,
                gate=_nvidia_gate,
                probe=lambda ctx: probe.packages_installed(nvidia),
                apply=_nvidia_apply,
                describe=lambda ctx: "apt install " + " ".join(nvidia),
            )
        )
    return steps

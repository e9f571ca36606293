from __future__ import annotations

import logging
from typing import List

from ..catalog import Catalog, Tool
from ..config import StepContext
from ..lib import probe
from ..lib.command import run_cmd
from ..lib.pkg import apt_install
from ..logging_utils import SUCCESS
from ..pipeline import StepDescriptor, StepResult

logger = logging.getLogger(__name__)


def _present(tool: Tool) -> bool:
    if tool.commands:
        return probe.any_command_exists(tool.commands)
    return probe.packages_installed(tool.packages)


def _tool_step(tool: Tool) -> StepDescriptor:
    def _apply(ctx: StepContext) -> StepResult:
        apt_install(tool.packages)
        for argv in tool.post_install:
            # Per-user configuration (e.g. `git lfs install` writes ~/.gitconfig).
            logger.info("Configuring %s: %s", tool.title, " ".join(argv))
            run_cmd(argv)
            logger.log(SUCCESS, "%s configured", tool.title)
        return StepResult.installed()

    def _describe(ctx: StepContext) -> str:
        parts = ["apt install " + " ".join(tool.packages)]
        parts += [" ".join(argv) for argv in tool.post_install]
        return " && ".join(parts)

    return StepDescriptor(
        name=tool.title,
        section=tool.title,
        probe=lambda ctx: _present(tool),
        apply=_apply,
        describe=_describe,
    )


def tool_steps(catalog: Catalog) -> List[StepDescriptor]:
    return [_tool_step(t) for t in catalog.tools]

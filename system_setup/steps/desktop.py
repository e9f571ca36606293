from __future__ import annotations

from typing import List, Optional

from ..catalog import Catalog, DesktopSetting
from ..config import StepContext
from ..lib import probe
from ..lib.gsettings import gsettings_set
from ..pipeline import StepDescriptor, StepResult


def _gate(ctx: StepContext) -> Optional[str]:
    if not probe.command_exists("gsettings"):
        return "gsettings not available"
    return None


def _setting_step(s: DesktopSetting) -> StepDescriptor:
    def _apply(ctx: StepContext) -> StepResult:
        gsettings_set(s.schema, s.key, s.value)
        return StepResult.installed()

    return StepDescriptor(
        name=f"Setting: {s.title}",
        section="Desktop Settings",
        gate=_gate,
        probe=lambda ctx: probe.gsetting_matches(s.schema, s.key, s.value),
        apply=_apply,
        describe=lambda ctx: f"gsettings set {s.schema} {s.key} {s.value}",
    )


def desktop_setting_steps(catalog: Catalog) -> List[StepDescriptor]:
    return [_setting_step(s) for s in catalog.desktop_settings]

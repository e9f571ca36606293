from __future__ import annotations

from typing import List

from ..catalog import Catalog
from ..pipeline import StepDescriptor
from .applications import application_steps
from .desktop import desktop_setting_steps
from .flatpak import flatpak_app_steps, flatpak_setup_steps
from .node import node_steps, npm_steps
from .system import bootstrap_steps, update_steps
from .system76 import system76_steps
from .tools import tool_steps


def build_steps(catalog: Catalog) -> List[StepDescriptor]:
    """The fixed, ordered step table for one run."""
    return [
        *bootstrap_steps(catalog),
        *update_steps(catalog),
        *system76_steps(catalog),
        *flatpak_setup_steps(catalog),
        *tool_steps(catalog),
        *node_steps(catalog),
        *npm_steps(catalog),
        *application_steps(catalog),
        *flatpak_app_steps(catalog),
        *application_steps(catalog, after_flatpak_apps=True),
        *desktop_setting_steps(catalog),
    ]


__all__ = ["build_steps"]

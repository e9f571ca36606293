from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .catalog import Catalog

DEFAULT_ARTIFACTS_DIR = "setup_artifacts"
DEFAULT_LOG_DIR = "."


class System76Mode(str, enum.Enum):
    AUTO = "auto"
    FORCE = "force"
    SKIP = "skip"


@dataclass(frozen=True)
class RunConfig:
    """Everything the command line decides. Built once, never mutated."""

    system76: System76Mode = System76Mode.AUTO
    install_nvidia_drivers: bool = True
    install_flatpak: bool = True
    pause_for_reboot: bool = True
    dry_run: bool = False
    catalog_path: Optional[str] = None
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    log_dir: str = DEFAULT_LOG_DIR


@dataclass(frozen=True)
class StepContext:
    config: RunConfig
    catalog: Catalog

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

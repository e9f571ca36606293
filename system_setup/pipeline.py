from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import StepContext
from .errors import CommandFailed, PreconditionFailure, SetupError, StepAborted
from .logging_utils import DRY_RUN, SECTION, SKIP, SUCCESS
from .lib.prompt import confirm_action

logger = logging.getLogger(__name__)


class StepStatus(str, enum.Enum):
    INSTALLED = "installed"
    ALREADY_PRESENT = "already_present"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    reason: Optional[str] = None
    exit_code: Optional[int] = None
    reboot_recommended: bool = False

    @classmethod
    def installed(cls, *, reboot_recommended: bool = False) -> "StepResult":
        return cls(StepStatus.INSTALLED, reboot_recommended=reboot_recommended)

    @classmethod
    def already_present(cls) -> "StepResult":
        return cls(StepStatus.ALREADY_PRESENT)

    @classmethod
    def skipped(cls, reason: str) -> "StepResult":
        return cls(StepStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: str, exit_code: Optional[int] = None) -> "StepResult":
        return cls(StepStatus.FAILED, reason=error, exit_code=exit_code)


def _never(ctx: StepContext) -> Optional[str]:
    return None


@dataclass(frozen=True)
class StepDescriptor:
    """One row of the step table.

    - gate: returns a skip reason when flags/hardware rule the step out.
    - probe: read-only; True when the end state already holds.
    - describe: what apply would do, for dry-run output.
    - apply: performs the mutation; raises SetupError on failure.
    - fatal: a failure aborts the whole run.
    """

    name: str
    probe: Callable[[StepContext], bool]
    apply: Callable[[StepContext], StepResult]
    describe: Callable[[StepContext], str]
    section: Optional[str] = None
    gate: Callable[[StepContext], Optional[str]] = _never
    fatal: bool = False


@dataclass
class PipelineResult:
    results: List[Tuple[str, StepResult]] = field(default_factory=list)
    stopped_early: bool = False

    def counts(self) -> Dict[StepStatus, int]:
        out = {s: 0 for s in StepStatus}
        for _, r in self.results:
            out[r.status] += 1
        return out

    def failed_steps(self) -> List[str]:
        return [name for name, r in self.results if r.status is StepStatus.FAILED]

    def result_for(self, name: str) -> Optional[StepResult]:
        for n, r in self.results:
            if n == name:
                return r
        return None


def run_step(step: StepDescriptor, ctx: StepContext) -> StepResult:
    """Gate -> probe -> (dry-run | apply) for a single step."""

    reason = step.gate(ctx)
    if reason is not None:
        logger.warning("Skipping %s (%s)", step.name, reason)
        return StepResult.skipped(reason)

    if step.probe(ctx):
        logger.log(SKIP, "%s", step.name)
        return StepResult.already_present()

    try:
        if ctx.dry_run:
            logger.log(DRY_RUN, "%s", step.describe(ctx))
            return StepResult.skipped("dry-run")

        result = step.apply(ctx)
    except PreconditionFailure:
        raise
    except CommandFailed as e:
        logger.error("%s failed: %s", step.name, e)
        return StepResult.failed(str(e), e.returncode)
    except SetupError as e:
        logger.error("%s failed: %s", step.name, e)
        return StepResult.failed(str(e))
    except OSError as e:
        # e.g. the package manager binary itself is missing
        logger.error("%s failed: %s", step.name, e)
        return StepResult.failed(str(e))

    if result.status is StepStatus.INSTALLED:
        logger.log(SUCCESS, "%s installed", step.name)
    return result


def run_pipeline(
    *,
    ctx: StepContext,
    steps: Sequence[StepDescriptor],
    confirm: Callable[[str, bool], bool] = confirm_action,
) -> PipelineResult:
    """Run steps in order; a failed or skipped step never stops the rest.

    Only a failing fatal step (StepAborted) or a PreconditionFailure ends the
    run early, plus the user choosing to reboot after Flatpak was installed.
    """

    out = PipelineResult()
    section: Optional[str] = None

    for step in steps:
        if step.section and step.section != section:
            section = step.section
            logger.log(SECTION, "%s", section)

        result = run_step(step, ctx)
        out.results.append((step.name, result))

        if step.fatal and result.status is StepStatus.FAILED:
            raise StepAborted(step.name, result.reason or "failed")

        if result.reboot_recommended and ctx.config.pause_for_reboot and not ctx.dry_run:
            logger.warning("%s was just installed. A system restart is recommended.", step.name)
            if confirm("Would you like to continue without rebooting?", True):
                logger.info("Continuing without reboot...")
            else:
                logger.info("Please reboot your system and run this script again")
                out.stopped_early = True
                break

    return out


def log_summary(result: PipelineResult) -> None:
    counts = result.counts()
    logger.log(SECTION, "Setup Complete")
    logger.info(
        "Installed: %d, already present: %d, skipped: %d, failed: %d",
        counts[StepStatus.INSTALLED],
        counts[StepStatus.ALREADY_PRESENT],
        counts[StepStatus.SKIPPED],
        counts[StepStatus.FAILED],
    )
    failed = result.failed_steps()
    if failed:
        logger.warning("Failed to install: %s", ", ".join(failed))
        for name, r in result.results:
            if r.status is StepStatus.FAILED:
                logger.debug("%s: %s", name, r.reason)
    elif not result.stopped_early:
        logger.log(SUCCESS, "System setup finished successfully!")

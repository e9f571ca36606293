from __future__ import annotations

import argparse
import logging
from typing import Callable, Optional, Sequence

from .catalog import load_catalog
from .config import DEFAULT_ARTIFACTS_DIR, DEFAULT_LOG_DIR, RunConfig, StepContext, System76Mode
from .errors import SetupError
from .lib.privileges import SudoKeepAlive, acquire_sudo
from .lib.prompt import confirm_action
from .logging_utils import configure_logging
from .pipeline import PipelineResult, StepDescriptor, log_summary, run_pipeline
from .steps import build_steps

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="system-setup",
        description="Provision a fresh Ubuntu / Pop!_OS desktop with development tools. Safe to re-run.",
    )
    p.add_argument(
        "--force-system76",
        dest="system76",
        action="store_const",
        const=System76Mode.FORCE,
        default=System76Mode.AUTO,
        help="Force System76 driver installation (auto-detected by default)",
    )
    p.add_argument(
        "--skip-system76",
        dest="system76",
        action="store_const",
        const=System76Mode.SKIP,
        help="Skip System76 driver installation even if detected",
    )
    p.add_argument("--skip-system76-nvidia", action="store_true", help="Skip NVIDIA driver installation")
    p.add_argument("--skip-flatpak", action="store_true", help="Skip Flatpak and Flatpak apps")
    p.add_argument("--skip-reboot-pause", action="store_true", help="Skip the reboot pause after Flatpak setup")
    p.add_argument("--dry-run", action="store_true", help="Show what would be installed without making changes")
    p.add_argument("--catalog", default=None, help="Alternative software catalog (YAML)")
    p.add_argument(
        "--artifacts-dir",
        default=DEFAULT_ARTIFACTS_DIR,
        help="Directory holding downloaded installers (.deb, .tar.gz, .bundle)",
    )
    p.add_argument("--log-dir", default=DEFAULT_LOG_DIR, help="Where to write setup-<timestamp>.log")
    return p


def parse_config(argv: Optional[Sequence[str]] = None) -> RunConfig:
    """All-or-nothing: an unknown flag exits (status 2) before anything runs."""

    args = build_parser().parse_args(argv)
    return RunConfig(
        system76=args.system76,
        install_nvidia_drivers=not args.skip_system76_nvidia,
        install_flatpak=not args.skip_flatpak,
        pause_for_reboot=not args.skip_reboot_pause,
        dry_run=bool(args.dry_run),
        catalog_path=args.catalog,
        artifacts_dir=args.artifacts_dir,
        log_dir=args.log_dir,
    )


def run(
    config: RunConfig,
    *,
    steps: Optional[Sequence[StepDescriptor]] = None,
    confirm: Callable[[str, bool], bool] = confirm_action,
) -> PipelineResult:
    """Run every step once; failed steps are reported, not escalated."""

    log_path = configure_logging(log_dir=config.log_dir)

    catalog = load_catalog(config.catalog_path)
    ctx = StepContext(config=config, catalog=catalog)
    if steps is None:
        steps = build_steps(catalog)

    if config.dry_run:
        logger.warning(">>> DRY RUN MODE - No changes will be made <<<")
    logger.info("Setup artifacts directory: %s", config.artifacts_dir)

    keepalive = SudoKeepAlive()
    try:
        if not config.dry_run:
            acquire_sudo()
            keepalive.start()

        result = run_pipeline(ctx=ctx, steps=steps, confirm=confirm)
        log_summary(result)
        logger.info("Log file saved to: %s", log_path)
        if not result.stopped_early:
            logger.warning("Recommended: Restart your computer to ensure all changes take effect")
        return result
    except Exception:
        logger.error("Check log file for details: %s", log_path)
        raise
    finally:
        keepalive.stop()


def main(argv: Optional[list[str]] = None) -> int:
    config = parse_config(argv)

    try:
        run(config)
    except SetupError as e:
        logger.error("%s", e)
        return 1
    except Exception:
        logger.exception("Setup failed")
        raise
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

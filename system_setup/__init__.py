"""system-setup: provision a fresh Ubuntu / Pop!_OS desktop.

Core design goals:
- Idempotent steps: probe first, act only when needed
- Safe to re-run after a partial failure
- Install everything possible; report failures instead of stopping
- Dry-run that never touches the host
- One log file per run
"""

__all__ = []

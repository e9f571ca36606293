from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .command import query_cmd

logger = logging.getLogger(__name__)

DMI_DIR = Path("/sys/class/dmi/id")
DRM_DIR = Path("/sys/class/drm")

_NVIDIA_VENDOR_ID = "0x10de"


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def is_system76_hardware() -> bool:
    """DMI sys_vendor check; instant and needs no privileges."""
    vendor = _read_text(DMI_DIR / "sys_vendor") or ""
    return "system76" in vendor.lower()


def _drm_vendor_ids() -> list[str]:
    if not DRM_DIR.exists():
        return []
    ids: list[str] = []
    for card in sorted(DRM_DIR.glob("card[0-9]*")):
        vendor = _read_text(card / "device" / "vendor")
        if vendor:
            ids.append(vendor.lower())
    return ids


def has_nvidia_gpu() -> bool:
    if _NVIDIA_VENDOR_ID in _drm_vendor_ids():
        return True
    # Enrichment for cards not bound to a DRM driver (e.g. before nvidia is installed).
    r = query_cmd(["lspci"])
    if r is None or not r.ok:
        return False
    return "nvidia" in r.stdout.lower()

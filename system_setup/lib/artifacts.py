from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..errors import MissingArtifact

logger = logging.getLogger(__name__)


def find_artifact(artifacts_dir: str | Path, pattern: str) -> Optional[Path]:
    """Locate a staged installer payload by filename glob.

    The artifacts directory is only read, never created. With several
    matches the lexically last one wins, which for versioned filenames is
    normally the newest.
    """

    d = Path(artifacts_dir).expanduser()
    if not d.is_dir():
        return None
    matches = sorted(p for p in d.glob(pattern) if p.is_file())
    return matches[-1] if matches else None


def require_artifact(artifacts_dir: str | Path, pattern: str, *, hint: Optional[str] = None) -> Path:
    found = find_artifact(artifacts_dir, pattern)
    if found is None:
        raise MissingArtifact(pattern, str(artifacts_dir), hint)
    logger.debug("Artifact %s -> %s", pattern, found)
    return found

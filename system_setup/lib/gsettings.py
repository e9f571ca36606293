from __future__ import annotations

import logging

from .command import run_cmd

logger = logging.getLogger(__name__)


def gsettings_set(schema: str, key: str, value: str) -> None:
    # Runs as the invoking user: desktop settings live in the user's dconf database.
    run_cmd(["gsettings", "set", schema, key, value])

from __future__ import annotations

import logging
from pathlib import Path

from ..logging_utils import SKIP, SUCCESS
from .command import run_cmd
from .probe import apt_repo_registered, file_exists

logger = logging.getLogger(__name__)


def fetch_text(url: str) -> str:
    """Download a small text resource (key, script, policy) with curl."""
    return run_cmd(["curl", "-fsSL", url]).stdout


def ppa_identifier(repo: str) -> str:
    """"ppa:system76-dev/stable" -> "system76-dev/stable"."""
    return repo[len("ppa:"):] if repo.startswith("ppa:") else repo


def add_apt_repository(repo: str, *, description: str = "repository") -> bool:
    """Register a PPA if missing. Returns True when something was added."""

    if apt_repo_registered(ppa_identifier(repo)):
        logger.log(SKIP, "%s", description)
        return False

    logger.info("Adding %s...", description)
    run_cmd(["apt-add-repository", "-y", repo], sudo=True)
    logger.log(SUCCESS, "%s added", description)
    return True


def install_keyring(key_url: str, keyring: str) -> bool:
    """Download an ASCII-armored key and store it dearmored at keyring."""

    if file_exists(keyring):
        logger.log(SKIP, "GPG key %s", keyring)
        return False

    logger.info("Adding GPG key %s...", keyring)
    key = fetch_text(key_url)
    run_cmd(["mkdir", "-p", str(Path(keyring).parent)], sudo=True)
    run_cmd(["gpg", "--batch", "--yes", "--dearmor", "--output", keyring], sudo=True, input_text=key)
    logger.log(SUCCESS, "GPG key added")
    return True


def write_root_file(path: str, contents: str) -> None:
    run_cmd(["tee", path], sudo=True, input_text=contents)


def add_signed_repository(*, sources_file: str, line: str, key_url: str, keyring: str) -> bool:
    """Register a third-party apt repo signed by its own keyring.

    Returns True when the sources file was written.
    """

    install_keyring(key_url, keyring)

    if file_exists(sources_file):
        logger.log(SKIP, "Repository %s", sources_file)
        return False

    logger.info("Adding repository %s...", sources_file)
    write_root_file(sources_file, line.rstrip("\n") + "\n")
    logger.log(SUCCESS, "Repository added")
    return True


def install_debsig_policy(*, policy_dir: str, policy_url: str, keyring_dir: str, key_url: str) -> bool:
    """Set up debsig-verify policy + keyring for a vendor package."""

    policy = str(Path(policy_dir) / Path(policy_url).name)
    if file_exists(policy):
        logger.log(SKIP, "debsig verification policy")
        return False

    logger.info("Setting up debsig verification...")
    run_cmd(["mkdir", "-p", policy_dir], sudo=True)
    write_root_file(policy, fetch_text(policy_url))
    run_cmd(["mkdir", "-p", keyring_dir], sudo=True)
    run_cmd(
        ["gpg", "--batch", "--yes", "--dearmor", "--output", str(Path(keyring_dir) / "debsig.gpg")],
        sudo=True,
        input_text=fetch_text(key_url),
    )
    logger.log(SUCCESS, "Debsig verification configured")
    return True


def run_repo_setup_script(url: str) -> None:
    """Vendor repo bootstrap scripts, e.g. NodeSource: curl URL | sudo -E bash -."""
    script = fetch_text(url)
    run_cmd(["bash", "-"], sudo=True, preserve_env=True, input_text=script)


def run_remote_script(url: str) -> None:
    """Installer scripts that call sudo themselves: curl URL | sh."""
    script = fetch_text(url)
    run_cmd(["sh"], input_text=script)

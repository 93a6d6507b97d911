"""Suggest running an image scan after a successful build."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TextIO

SCAN_SUGGEST_MSG = (
    "Use 'docker scan' to run Snyk tests against images to find "
    "vulnerabilities and learn how to fix them"
)

_SYSTEM_PLUGIN_DIRS: tuple[str, ...] = (
    "/usr/local/lib/docker/cli-plugins",
    "/usr/local/libexec/docker/cli-plugins",
    "/usr/lib/docker/cli-plugins",
    "/usr/libexec/docker/cli-plugins",
)


def _config_dir(config_dir: str | os.PathLike[str] | None) -> Path:
    if config_dir is not None:
        return Path(config_dir)
    env = os.environ.get("DOCKER_CONFIG")
    if env:
        return Path(env)
    return Path.home() / ".docker"


def scan_already_invoked(config_dir: str | os.PathLike[str] | None = None) -> bool:
    """Return True if the scan configuration records an opt-in.

    Anything unexpected about the configuration file counts as already
    invoked, so the user is not bothered with a suggestion.
    """
    filename = _config_dir(config_dir) / "scan" / "config.json"
    if not filename.exists():
        return False
    if filename.is_dir():
        return True
    try:
        data = json.loads(filename.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return True
    if data is None:
        return False
    if not isinstance(data, dict):
        return True
    optin = None
    for key, value in data.items():
        if key.lower() == "optin":
            optin = value
    if optin is None:
        return False
    if not isinstance(optin, bool):
        return True
    return optin


def scan_available(config_dir: str | os.PathLike[str] | None = None) -> bool:
    """Return True if a ``scan`` CLI plugin is installed."""
    name = "docker-scan.exe" if sys.platform == "win32" else "docker-scan"
    directories = [_config_dir(config_dir) / "cli-plugins"]
    directories.extend(Path(d) for d in _SYSTEM_PLUGIN_DIRS)
    return any((directory / name).exists() for directory in directories)


def display_scan_suggest_msg(
    config_dir: str | os.PathLike[str] | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Print the scan suggestion when appropriate; return whether it was shown."""
    if os.environ.get("DOCKER_SCAN_SUGGEST") == "false":
        return False
    if not scan_available(config_dir):
        return False
    if scan_already_invoked(config_dir):
        return False
    out = stream if stream is not None else sys.stderr
    out.write("\n" + SCAN_SUGGEST_MSG + "\n")
    return True
"""
L3 Detection — Installed node version.

Runs ``bitcoind-sv2tp --version`` from the install directory and parses
the first ``X.Y.Z`` it prints.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from sv2_installer.core.models.release import Version
from sv2_installer.core.services.release.data.constants import BINARY_SUFFIX, NODE_DAEMON
from sv2_installer.core.services.release.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


def parse_version_output(output: str) -> Version | None:
    """Extract the first ``X.Y.Z`` from ``--version`` output."""
    match = _VERSION_RE.search(output)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def get_installed_version(install_dir: Path, suffix: str = BINARY_SUFFIX) -> Version | None:
    """Return the installed daemon's version, or None if it is not installed."""
    daemon = install_dir / f"{NODE_DAEMON}{suffix}"
    if not daemon.is_file():
        logger.info("No installed daemon at %s", daemon)
        return None

    result = run_command([str(daemon), "--version"], timeout=15)
    if not result["ok"]:
        logger.warning("Cannot read version from %s: %s", daemon, result["error"])
        return None

    version = parse_version_output(result["stdout"])
    if version is None:
        logger.warning("Unrecognized version output from %s", daemon)
    return version

"""
L3 Detection — Required command-line tool checks.

Read-only: looks binaries up on PATH and, for anything missing, builds
the package-manager command that would install it. Nothing is installed
from here.
"""

from __future__ import annotations

import logging
import shutil

from sv2_installer.core.services.release.data.constants import (
    DISTRO_FAMILIES,
    INSTALL_COMMANDS,
    PACKAGE_NAMES,
    REQUIRED_TOOLS,
    SOURCE_BUILD_TOOLS,
)

logger = logging.getLogger(__name__)


def distro_family(distro: str) -> str:
    """Map a distro ID (``ubuntu``, ``fedora``, ``macos``) to its family.

    Unknown distros map to ``""``.
    """
    if distro == "macos":
        return "macos"
    return DISTRO_FAMILIES.get(distro.lower(), "")


def check_required_tools(
    distro: str,
    *,
    include_source_build: bool = False,
) -> dict:
    """Check that the tools an install needs are on PATH.

    Args:
        distro: Distro ID from ``detect_distro`` (or ``"macos"``).
        include_source_build: Also require ``git`` and ``cargo``.

    Returns::

        {
            "ok": bool,
            "found": {"download-tool": "/usr/bin/curl", ...},
            "missing": ["cargo", ...],
            "family": "debian",
            "install_command": ["apt-get", "install", "-y", "cargo"] | None,
        }
    """
    wanted = dict(REQUIRED_TOOLS)
    if include_source_build:
        wanted.update(SOURCE_BUILD_TOOLS)

    found: dict[str, str] = {}
    missing: list[str] = []
    for capability, binary in wanted.items():
        path = shutil.which(binary)
        if path:
            found[capability] = path
        else:
            logger.debug("Missing %s (%s)", binary, capability)
            missing.append(binary)

    family = distro_family(distro)
    command: list[str] | None = None
    if missing and family in INSTALL_COMMANDS:
        names = PACKAGE_NAMES.get(family, {})
        command = INSTALL_COMMANDS[family] + [names.get(b, b) for b in missing]

    if missing:
        logger.warning("Missing required tools: %s", ", ".join(missing))

    return {
        "ok": not missing,
        "found": found,
        "missing": missing,
        "family": family,
        "install_command": command,
    }

"""
L3 Detection — Host platform identification.

Maps the host OS and CPU architecture onto the artifact platform triple
and builds the per-run ``HostContext``. OS detection is strict (no
artifacts exist for other systems); architecture detection is lenient
and falls back to x86_64 with a warning, matching the install scripts.
"""

from __future__ import annotations

import getpass
import logging
import os
import platform as _platform
from pathlib import Path

from sv2_installer.core.models.platform import Abi, Arch, HostContext, OsKind, PlatformTriple
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.domain.errors import PlatformError

logger = logging.getLogger(__name__)

_OS_MAP: dict[str, OsKind] = {
    "linux": OsKind.LINUX,
    "darwin": OsKind.MACOS,
}

_ARCH_MAP: dict[str, Arch] = {
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "aarch64": Arch.AARCH64,
    "arm64": Arch.AARCH64,
    "armv7l": Arch.ARM,
    "armv6l": Arch.ARM,
}


def detect_os(system: str | None = None) -> OsKind:
    """Map ``platform.system()`` (or ``system``) onto a supported OS.

    Raises:
        PlatformError: For anything other than Linux or macOS.
    """
    raw = system if system is not None else _platform.system()
    os_kind = _OS_MAP.get(raw.strip().lower())
    if os_kind is None:
        raise PlatformError(f"Unsupported operating system: {raw or 'unknown'}")
    return os_kind


def identify_platform(
    system: str | None = None,
    machine: str | None = None,
) -> PlatformTriple:
    """Compute the platform triple for the host.

    Args:
        system: OS name override (default: ``platform.system()``).
        machine: Architecture override (default: ``platform.machine()``).

    Raises:
        PlatformError: If the OS is unsupported.
    """
    os_kind = detect_os(system)
    raw_arch = (machine if machine is not None else _platform.machine()).strip()

    arch = _ARCH_MAP.get(raw_arch.lower())
    if arch is None:
        logger.warning("Unrecognized architecture: %s, defaulting to x86_64", raw_arch or "?")
        arch = Arch.X86_64

    if os_kind is OsKind.MACOS:
        abi = Abi.DARWIN
        if arch is Arch.ARM:
            logger.warning(
                "ARM 32-bit on macOS is not typically supported by these binaries; "
                "continuing with a generic ARM build",
            )
    elif arch is Arch.ARM:
        abi = Abi.GNUEABIHF
    else:
        abi = Abi.GNU

    triple = PlatformTriple(os=os_kind, arch=arch, abi=abi)
    logger.info("System architecture: %s", triple.label)
    return triple


def detect_distro(os_release: Path = Path("/etc/os-release")) -> str:
    """Read the distro ID (``ubuntu``, ``fedora``, ...) from os-release.

    Returns an empty string when the file is missing or has no ID.
    """
    try:
        with open(os_release, encoding="utf-8") as f:
            for line in f:
                if line.startswith("ID="):
                    return line.strip().split("=", 1)[1].strip('"').lower()
    except OSError:
        logger.debug("Cannot read %s", os_release)
    return ""


def detect_user() -> tuple[str, Path]:
    """Return the invoking user and their home directory.

    Under ``sudo`` this is the original user (``SUDO_USER``), not root.
    """
    user = os.environ.get("SUDO_USER") or os.environ.get("USER") or ""
    if not user:
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            user = "unknown"
    home = Path(os.path.expanduser(f"~{user}"))
    if not home.is_absolute() or str(home).startswith("~"):
        home = Path.home()
    return user, home


def build_host_context(
    settings: InstallerSettings,
    *,
    system: str | None = None,
    machine: str | None = None,
    user: str | None = None,
    home_dir: Path | None = None,
) -> HostContext:
    """Construct the immutable context for this run.

    Raises:
        PlatformError: If the OS is unsupported.
    """
    triple = identify_platform(system=system, machine=machine)
    if user is None or home_dir is None:
        detected_user, detected_home = detect_user()
        user = user or detected_user
        home_dir = home_dir or detected_home

    distro = detect_distro() if triple.os is OsKind.LINUX else "macos"

    return HostContext(
        platform=triple,
        user=user,
        home_dir=home_dir,
        install_dir=settings.install_dir,
        distro=distro,
    )

"""
Platform models — the host triple and the per-run host context.

``HostContext`` is built once at startup and passed explicitly into
every component; nothing reads OS/arch/paths from module globals.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class OsKind(StrEnum):
    """Operating systems that have published artifacts."""

    LINUX = "linux"
    MACOS = "macos"


class Arch(StrEnum):
    """CPU architectures as they appear in artifact names."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"
    ARM = "arm"


class Abi(StrEnum):
    """ABI component of the artifact platform suffix."""

    GNU = "gnu"
    GNUEABIHF = "gnueabihf"
    DARWIN = "darwin"


class PlatformTriple(BaseModel):
    """(os, arch, abi) identifying which prebuilt artifact to fetch."""

    model_config = ConfigDict(frozen=True)

    os: OsKind
    arch: Arch
    abi: Abi

    @property
    def suffix(self) -> str:
        """Platform suffix used in artifact filenames.

        ``linux-gnu``, ``linux-gnueabihf`` or ``apple-darwin``.
        """
        if self.os is OsKind.MACOS:
            return "apple-darwin"
        return f"linux-{self.abi.value}"

    @property
    def label(self) -> str:
        return f"{self.arch.value}-{self.suffix}"

    def to_dict(self) -> dict:
        return {
            "os": self.os.value,
            "arch": self.arch.value,
            "abi": self.abi.value,
            "suffix": self.suffix,
        }


class HostContext(BaseModel):
    """Everything a run needs to know about the host, computed once."""

    model_config = ConfigDict(frozen=True)

    platform: PlatformTriple
    user: str
    home_dir: Path
    install_dir: Path
    distro: str = ""

    @property
    def os(self) -> OsKind:
        return self.platform.os

    @property
    def arch(self) -> Arch:
        return self.platform.arch

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.to_dict(),
            "user": self.user,
            "home_dir": str(self.home_dir),
            "install_dir": str(self.install_dir),
            "distro": self.distro,
        }

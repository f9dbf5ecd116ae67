"""
L1 Domain — Error taxonomy (pure).

Every failure names the stage it happened in and the last URL or
path that was attempted, so the operator can see exactly where a run
stopped.

    FeedError        feed unreachable/malformed — recoverable via probing
    PlatformError    unsupported OS/arch — fatal, no fallback
    DownloadError    transport failure fetching the artifact
    ExtractError     corrupt or unsafe archive
    NoArtifactError  archive contained no executables
    InstallIOError   copy/permission failure at the final destination
"""

from __future__ import annotations

from sv2_installer.core.models.artifact import ErrorKind


class ReleaseError(Exception):
    """Base class for release resolution and installation failures."""

    kind: ErrorKind = ErrorKind.FEED
    stage: str = "release"

    def __init__(self, message: str, *, location: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def to_dict(self) -> dict:
        return {
            "error": self.kind.value,
            "stage": self.stage,
            "message": self.message,
            "location": self.location,
        }


class FeedError(ReleaseError):
    kind = ErrorKind.FEED
    stage = "fetch tags"


class PlatformError(ReleaseError):
    kind = ErrorKind.PLATFORM
    stage = "identify platform"


class DownloadError(ReleaseError):
    kind = ErrorKind.DOWNLOAD
    stage = "download"


class ExtractError(ReleaseError):
    kind = ErrorKind.EXTRACT
    stage = "extract"


class NoArtifactError(ReleaseError):
    kind = ErrorKind.NO_ARTIFACT
    stage = "locate executables"


class InstallIOError(ReleaseError):
    kind = ErrorKind.INSTALL_IO
    stage = "install"


class ProxyInstallError(ReleaseError):
    """Neither the prebuilt binary nor a source build produced a proxy client."""

    kind = ErrorKind.NO_ARTIFACT
    stage = "proxy install"

"""
Artifact and install-result models.

``ArtifactDescriptor`` is derived from a tag and a platform on every
run and never persisted. ``InstallResult`` is produced at the end of
the install pipeline and consumed immediately by the caller.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from sv2_installer.core.models.platform import PlatformTriple
from sv2_installer.core.models.release import ReleaseTag


class ErrorKind(StrEnum):
    """Failure categories surfaced to the operator."""

    FEED = "feed"
    PLATFORM = "platform"
    DOWNLOAD = "download"
    EXTRACT = "extract"
    NO_ARTIFACT = "no_artifact"
    INSTALL_IO = "install_io"


class InstallState(StrEnum):
    """Install pipeline states.

    pending → downloaded → extracted → installed | failed
    """

    PENDING = "pending"
    DOWNLOADED = "downloaded"
    EXTRACTED = "extracted"
    INSTALLED = "installed"
    FAILED = "failed"


class ArtifactDescriptor(BaseModel):
    """Downloadable archive for a tag on a platform."""

    model_config = ConfigDict(frozen=True)

    tag: ReleaseTag
    platform: PlatformTriple
    filename: str
    url: str

    def to_dict(self) -> dict:
        return {
            "tag": self.tag.name,
            "variant": self.tag.variant.value,
            "version": self.tag.version_string,
            "platform": self.platform.label,
            "filename": self.filename,
            "url": self.url,
        }


class InstallResult(BaseModel):
    """Terminal outcome of one install pipeline run."""

    model_config = ConfigDict(frozen=True)

    success: bool
    state: InstallState
    installed_path: Path | None = None
    installed_files: tuple[Path, ...] = Field(default_factory=tuple)
    error: ErrorKind | None = None
    message: str = ""
    stage: str = ""
    last_location: str = ""

    @classmethod
    def installed(cls, files: list[Path], install_dir: Path) -> InstallResult:
        return cls(
            success=True,
            state=InstallState.INSTALLED,
            installed_path=install_dir,
            installed_files=tuple(files),
        )

    @classmethod
    def failed(
        cls,
        error: ErrorKind,
        message: str,
        *,
        stage: str = "",
        last_location: str = "",
    ) -> InstallResult:
        return cls(
            success=False,
            state=InstallState.FAILED,
            error=error,
            message=message,
            stage=stage,
            last_location=last_location,
        )

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "state": self.state.value,
            "installed_path": str(self.installed_path) if self.installed_path else None,
            "installed_files": [str(p) for p in self.installed_files],
            "error": self.error.value if self.error else None,
            "message": self.message,
            "stage": self.stage,
            "last_location": self.last_location,
        }

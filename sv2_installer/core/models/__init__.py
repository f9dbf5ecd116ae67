"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from sv2_installer.core.models import ReleaseTag, PlatformTriple, InstallResult
"""

from sv2_installer.core.models.artifact import (
    ArtifactDescriptor,
    ErrorKind,
    InstallResult,
    InstallState,
)
from sv2_installer.core.models.platform import (
    Abi,
    Arch,
    HostContext,
    OsKind,
    PlatformTriple,
)
from sv2_installer.core.models.release import (
    ReleaseSelection,
    ReleaseTag,
    SelectionSource,
    Variant,
    Version,
    format_version,
)
from sv2_installer.core.models.settings import InstallerSettings

__all__ = [
    # platform.py
    "Abi",
    "Arch",
    # artifact.py
    "ArtifactDescriptor",
    "ErrorKind",
    "HostContext",
    "InstallResult",
    "InstallState",
    # settings.py
    "InstallerSettings",
    "OsKind",
    "PlatformTriple",
    # release.py
    "ReleaseSelection",
    "ReleaseTag",
    "SelectionSource",
    "Variant",
    "Version",
    "format_version",
]

"""
L1 Domain — Artifact naming and URL templates (pure).

Builds the expected archive filename and every URL the installer talks
to. No I/O, no failure modes beyond malformed input, which upstream
validation already excludes.
"""

from __future__ import annotations

from sv2_installer.core.models.artifact import ArtifactDescriptor
from sv2_installer.core.models.platform import PlatformTriple
from sv2_installer.core.models.release import ReleaseTag, Variant
from sv2_installer.core.services.release.data.constants import (
    ARTIFACT_EXTENSION,
    ARTIFACT_PREFIX,
    DEFAULT_API_HOST,
    DEFAULT_HOST,
    NODE_REPO,
)


def artifact_filename(tag: ReleaseTag, platform: PlatformTriple) -> str:
    """``bitcoin-sv2-tp-<X.Y.Z>[-ipc]-<arch>-<suffix>.tar.gz``."""
    ipc = "-ipc" if tag.variant is Variant.IPC else ""
    return (
        f"{ARTIFACT_PREFIX}-{tag.version_string}{ipc}"
        f"-{platform.arch.value}-{platform.suffix}{ARTIFACT_EXTENSION}"
    )


def download_url(tag: ReleaseTag, filename: str, *, host: str = DEFAULT_HOST, repo: str = NODE_REPO) -> str:
    return f"https://{host}/{repo}/releases/download/{tag.name}/{filename}"


def release_tag_url(tag_name: str, *, host: str = DEFAULT_HOST, repo: str = NODE_REPO) -> str:
    """Human-facing release page, also used for existence probes."""
    return f"https://{host}/{repo}/releases/tag/{tag_name}"


def tags_api_url(*, api_host: str = DEFAULT_API_HOST, repo: str = NODE_REPO) -> str:
    return f"https://{api_host}/repos/{repo}/tags"


def latest_release_api_url(repo: str, *, api_host: str = DEFAULT_API_HOST) -> str:
    return f"https://{api_host}/repos/{repo}/releases/latest"


def resolve_artifact(
    tag: ReleaseTag,
    platform: PlatformTriple,
    *,
    host: str = DEFAULT_HOST,
    repo: str = NODE_REPO,
) -> ArtifactDescriptor:
    """Compose the download descriptor for ``tag`` on ``platform``."""
    filename = artifact_filename(tag, platform)
    return ArtifactDescriptor(
        tag=tag,
        platform=platform,
        filename=filename,
        url=download_url(tag, filename, host=host, repo=repo),
    )

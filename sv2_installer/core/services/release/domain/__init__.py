"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from sv2_installer.core.services.release.domain.artifact import (  # noqa: F401
    artifact_filename,
    download_url,
    latest_release_api_url,
    release_tag_url,
    resolve_artifact,
    tags_api_url,
)
from sv2_installer.core.services.release.domain.errors import (  # noqa: F401
    DownloadError,
    ExtractError,
    FeedError,
    InstallIOError,
    NoArtifactError,
    PlatformError,
    ProxyInstallError,
    ReleaseError,
)
from sv2_installer.core.services.release.domain.tags import (  # noqa: F401
    parse_tag,
    parse_version,
    select_latest,
)

"""
L0 Data — ``__init__.py`` re-exports constant tables.

Pure data, no logic.
"""

from sv2_installer.core.services.release.data.constants import (  # noqa: F401
    DEFAULT_API_HOST,
    DEFAULT_HOST,
    DEFAULT_VERSION,
    FALLBACK_VERSIONS,
    NODE_REPO,
    PROXY_REPO,
    REQUIRED_TOOLS,
    SOURCE_BUILD_TOOLS,
)

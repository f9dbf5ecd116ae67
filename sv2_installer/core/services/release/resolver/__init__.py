"""
L2 Resolver — ``__init__.py`` re-exports version resolution.
"""

from sv2_installer.core.services.release.resolver.version_resolution import (  # noqa: F401
    probe_known_versions,
    resolve_latest_version,
)

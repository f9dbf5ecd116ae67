"""
L3 Detection — ``__init__.py`` re-exports all read-only probes.

These functions READ the host and the network but never write.
"""

from sv2_installer.core.services.release.detection.feed import (  # noqa: F401
    fetch_latest_release,
    fetch_tags,
    url_exists,
)
from sv2_installer.core.services.release.detection.installed_version import (  # noqa: F401
    get_installed_version,
    parse_version_output,
)
from sv2_installer.core.services.release.detection.platform import (  # noqa: F401
    build_host_context,
    detect_distro,
    detect_os,
    detect_user,
    identify_platform,
)
from sv2_installer.core.services.release.detection.system_deps import (  # noqa: F401
    check_required_tools,
    distro_family,
)

"""
Release service — package re-exports.

Resolves, downloads and installs published releases of the patched
node and the proxy client::

    from sv2_installer.core.services.release import install_node

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → domain → resolver → detection → execution →
orchestration).
"""

# ── L1: Domain ──
from sv2_installer.core.services.release.domain.artifact import resolve_artifact  # noqa: F401
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
    select_latest,
)

# ── L2: Resolver ──
from sv2_installer.core.services.release.resolver.version_resolution import (  # noqa: F401
    resolve_latest_version,
)

# ── L3: Detection ──
from sv2_installer.core.services.release.detection.feed import fetch_tags  # noqa: F401
from sv2_installer.core.services.release.detection.platform import (  # noqa: F401
    build_host_context,
    identify_platform,
)
from sv2_installer.core.services.release.detection.system_deps import (  # noqa: F401
    check_required_tools,
)

# ── L4: Execution ──
from sv2_installer.core.services.release.execution.pipeline import install  # noqa: F401

# ── L5: Orchestration ──
from sv2_installer.core.services.release.orchestration.orchestrator import (  # noqa: F401
    DecisionProvider,
    PresetDecisions,
    install_node,
    install_proxy,
    update_node,
)

"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from sv2_installer.core.services.release.orchestration.orchestrator import (  # noqa: F401
    DecisionProvider,
    PresetDecisions,
    install_node,
    install_proxy,
    update_node,
)

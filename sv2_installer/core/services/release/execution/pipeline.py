"""
L4 Execution — Install pipeline for a resolved artifact.

State machine::

    pending → downloaded → extracted → installed
        ↘          ↘            ↘
                  failed

Each run owns a fresh temporary working directory that is removed on
every exit path. The install directory is only touched in the final
placement step, which is atomic per file and all-or-nothing for staging.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from sv2_installer.core.models.artifact import ArtifactDescriptor, InstallResult, InstallState
from sv2_installer.core.services.release.data.constants import BINARY_SUFFIX
from sv2_installer.core.services.release.domain.errors import ReleaseError
from sv2_installer.core.services.release.execution.archive import extract_archive, locate_executables
from sv2_installer.core.services.release.execution.download import download_file
from sv2_installer.core.services.release.execution.placement import place_executables

logger = logging.getLogger(__name__)


def install(
    descriptor: ArtifactDescriptor,
    *,
    install_dir: Path,
    suffix: str = BINARY_SUFFIX,
    connect_timeout: float = 30.0,
    download_timeout: float = 120.0,
    work_root: Path | None = None,
) -> InstallResult:
    """Download, extract, and install the executables of ``descriptor``.

    Args:
        descriptor: Artifact to install.
        install_dir: Final destination (e.g. ``/usr/local/bin``).
        suffix: Appended to every installed executable name.
        connect_timeout: Socket timeout for the download.
        download_timeout: Overall download deadline.
        work_root: Parent for the temporary working directory
            (default: the system temp dir).

    Returns:
        ``InstallResult`` in state ``installed`` or ``failed``.
    """
    state = InstallState.PENDING
    logger.info("Installing %s for %s", descriptor.tag.name, descriptor.platform.label)

    with tempfile.TemporaryDirectory(prefix="sv2-install-", dir=work_root) as work:
        work_dir = Path(work)
        try:
            archive = download_file(
                descriptor.url,
                work_dir / descriptor.filename,
                connect_timeout=connect_timeout,
                total_timeout=download_timeout,
            )
            state = InstallState.DOWNLOADED

            extracted = extract_archive(archive, work_dir / "extract")
            state = InstallState.EXTRACTED

            executables = locate_executables(extracted)
            placed = place_executables(executables, install_dir, suffix)
        except ReleaseError as exc:
            logger.error(
                "Install failed in state %s at stage '%s': %s (%s)",
                state.value, exc.stage, exc.message, exc.location,
            )
            return InstallResult.failed(
                exc.kind,
                exc.message,
                stage=exc.stage,
                last_location=exc.location or descriptor.url,
            )

    logger.info(
        "Installed %s: %s", descriptor.tag.name, ", ".join(p.name for p in placed),
    )
    return InstallResult.installed(placed, install_dir)

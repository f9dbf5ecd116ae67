"""
L4 Execution — Archive extraction and executable discovery.

Release archives are gzip tarballs shaped like::

    bitcoin-sv2-tp-0.1.17/
        bin/bitcoind
        bin/bitcoin-cli
        share/...

Extraction is bounded (entry count, total size) and uses tarfile's
``data`` filter. Absolute paths, ``..`` components, links and device
nodes are refused before anything is written; release archives hold
only plain files and directories.
"""

from __future__ import annotations

import logging
import stat
import tarfile
from pathlib import Path

from sv2_installer.core.services.release.data.constants import (
    EXTRACT_DIR_PREFIXES,
    MAX_ARCHIVE_ENTRIES,
    MAX_ARCHIVE_TOTAL_BYTES,
)
from sv2_installer.core.services.release.domain.errors import ExtractError, NoArtifactError

logger = logging.getLogger(__name__)


def extract_archive(archive_path: Path, target_dir: Path) -> Path:
    """Extract a ``.tar.gz`` into ``target_dir``.

    Raises:
        ExtractError: If the archive is unreadable, corrupt, too large,
            or contains unsafe members.
    """
    logger.info("Extracting %s", archive_path.name)
    target_dir.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()
            _check_members(members, archive_path)
            tar.extractall(target_dir, members=members, filter="data")
    except ExtractError:
        raise
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise ExtractError(f"Cannot extract archive: {exc}", location=str(archive_path)) from exc

    logger.debug("Extracted %d entries into %s", len(members), target_dir)
    return target_dir


def _check_members(members: list[tarfile.TarInfo], archive_path: Path) -> None:
    if len(members) > MAX_ARCHIVE_ENTRIES:
        raise ExtractError(
            f"Archive has {len(members)} entries (limit {MAX_ARCHIVE_ENTRIES})",
            location=str(archive_path),
        )
    for member in members:
        if member.name.startswith("/") or ".." in Path(member.name).parts:
            raise ExtractError(
                f"Unsafe path in archive: {member.name}",
                location=str(archive_path),
            )
        if member.issym() or member.islnk() or member.isdev():
            raise ExtractError(
                f"Archive member is a link or device: {member.name}",
                location=str(archive_path),
            )
    total = sum(m.size for m in members if m.isfile())
    if total > MAX_ARCHIVE_TOTAL_BYTES:
        raise ExtractError(
            f"Archive expands to {total} bytes (limit {MAX_ARCHIVE_TOTAL_BYTES})",
            location=str(archive_path),
        )


def _is_executable_file(path: Path) -> bool:
    try:
        st = path.lstat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode) and bool(st.st_mode & 0o111)


def find_release_root(extract_dir: Path) -> Path:
    """Return the top-level ``bitcoin-*``/``sv2-*`` directory, or ``extract_dir``."""
    candidates = sorted(
        p for p in extract_dir.iterdir()
        if p.is_dir() and p.name.startswith(EXTRACT_DIR_PREFIXES)
    )
    return candidates[0] if candidates else extract_dir


def locate_executables(extract_dir: Path) -> list[Path]:
    """Find the executables to install.

    A ``bin/`` directory under the release root wins; otherwise the
    release root's own top level is scanned for executable files.

    Raises:
        NoArtifactError: If neither location holds an executable.
    """
    root = find_release_root(extract_dir)
    bin_dir = root / "bin"

    if bin_dir.is_dir():
        logger.info("Found bin directory: %s", bin_dir)
        search = bin_dir
    else:
        logger.info("No bin directory found, scanning %s", root)
        search = root

    found = sorted(p for p in search.iterdir() if _is_executable_file(p))
    if not found:
        raise NoArtifactError(
            "No executables found in the extracted archive's top level or bin directory",
            location=str(search),
        )
    logger.debug("Executables: %s", ", ".join(p.name for p in found))
    return found

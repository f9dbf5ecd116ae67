"""
L4 Execution — Atomic placement of executables into the install directory.

Three phases:
    1. stage   — copy every file to a hidden sibling temp file, chmod 0755
    2. backup  — move any file already under a final name aside
    3. commit  — ``os.replace`` each staged file onto its final name

A failure in any phase removes every staged file and puts the backups
back, so the install directory is left exactly as it was. No
partially-written file is ever visible under a final name.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from sv2_installer.core.services.release.domain.errors import InstallIOError

logger = logging.getLogger(__name__)

EXEC_MODE = 0o755


def _stage(source: Path, install_dir: Path, final_name: str) -> Path:
    fd, tmp_path = tempfile.mkstemp(dir=install_dir, prefix=f".{final_name}.", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
        tmp.chmod(EXEC_MODE)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def _backup(target: Path) -> Path | None:
    """Move an existing ``target`` to a hidden sibling; None if there was none."""
    if not (target.exists() or target.is_symlink()):
        return None
    fd, bak_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".bak")
    os.close(fd)
    backup = Path(bak_path)
    try:
        os.replace(target, backup)
    except OSError:
        backup.unlink(missing_ok=True)
        raise
    return backup


def _rollback(committed: list[tuple[Path, Path | None]]) -> None:
    """Undo commits in reverse: restore backups, remove files that were new."""
    for target, backup in reversed(committed):
        try:
            if backup is None:
                target.unlink(missing_ok=True)
            else:
                os.replace(backup, target)
        except OSError as exc:
            logger.error("Cannot restore %s: %s", target, exc)


def place_files(items: list[tuple[Path, str]], install_dir: Path) -> list[Path]:
    """Install ``(source, final_name)`` pairs into ``install_dir``.

    Either every file is installed or none is.

    Returns:
        Final paths, in input order.

    Raises:
        InstallIOError: With the exact path that could not be written.
    """
    try:
        install_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InstallIOError(f"Cannot create install directory: {exc}", location=str(install_dir)) from exc

    staged: list[tuple[Path, Path]] = []
    committed: list[tuple[Path, Path | None]] = []
    try:
        for source, final_name in items:
            target = install_dir / final_name
            try:
                tmp = _stage(source, install_dir, final_name)
            except OSError as exc:
                raise InstallIOError(f"Cannot copy {source.name}: {exc}", location=str(target)) from exc
            staged.append((tmp, target))

        for tmp, target in staged:
            logger.info("Copying %s to %s", target.name, target)
            try:
                backup = _backup(target)
            except OSError as exc:
                raise InstallIOError(f"Cannot replace {target.name}: {exc}", location=str(target)) from exc
            committed.append((target, backup))
            try:
                os.replace(tmp, target)
            except OSError as exc:
                raise InstallIOError(f"Cannot install {target.name}: {exc}", location=str(target)) from exc
    except InstallIOError:
        _rollback(committed)
        raise
    finally:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)

    for _, backup in committed:
        if backup is not None:
            backup.unlink(missing_ok=True)
    return [target for _, target in staged]


def place_executables(sources: list[Path], install_dir: Path, suffix: str) -> list[Path]:
    """Install each executable as ``<name><suffix>`` (e.g. ``bitcoind-sv2tp``)."""
    return place_files([(src, f"{src.name}{suffix}") for src in sources], install_dir)

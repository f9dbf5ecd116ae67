"""
L4 Execution — Shell environment persistence.

Writes ``~/.sv2_environment`` (``TOKEN`` and ``TP_ADDRESS`` exports, 0600, owned by
the invoking user) and makes interactive shells source it. Shell rc
edits are append-only and idempotent: a block is added once and never duplicated.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from sv2_installer.core.models.platform import OsKind
from sv2_installer.core.services.release.domain.errors import InstallIOError
from sv2_installer.core.services.release.execution.ownership import chown_to_user

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".sv2_environment"
ENV_FILE_MODE = 0o600


def shell_config_line(
    shell_type: str,
    *,
    path_entry: str | None = None,
    env_var: tuple[str, str] | None = None,
) -> str:
    """Generate a shell-specific PATH or env export line.

    Args:
        shell_type: ``"bash"`` | ``"zsh"`` | ``"fish"`` | etc.
        path_entry: Directory to add to PATH, e.g. ``"$HOME/.local/bin"``.
        env_var: Tuple of ``(name, value)`` e.g. ``("TOKEN", "abc")``.
    """
    if shell_type == "fish":
        if path_entry:
            return f"set -gx PATH {path_entry} $PATH"
        if env_var:
            return f"set -gx {env_var[0]} {env_var[1]}"
    else:
        if path_entry:
            return f'export PATH="{path_entry}:$PATH"'
        if env_var:
            return f'export {env_var[0]}="{env_var[1]}"'
    return ""


def shell_rc_files(home: Path, os_kind: OsKind) -> list[Path]:
    """Existing shell startup files that should source the environment file.

    ``.profile`` is skipped when ``.bash_profile`` already covers login
    shells (bash ignores ``.profile`` in that case).
    """
    candidates: list[Path] = []
    bashrc = home / ".bashrc"
    zshrc = home / ".zshrc"
    bash_profile = home / ".bash_profile"
    profile = home / ".profile"

    if bashrc.is_file():
        candidates.append(bashrc)
    if zshrc.is_file():
        candidates.append(zshrc)
    if os_kind is OsKind.MACOS and bash_profile.is_file():
        candidates.append(bash_profile)
    if profile.is_file() and bash_profile not in candidates:
        candidates.append(profile)

    return list(dict.fromkeys(candidates))


def append_once(rc_file: Path, marker: str, block: str) -> bool:
    """Append ``block`` to ``rc_file`` unless ``marker`` is already present.

    Returns:
        True if the file was changed.

    Raises:
        InstallIOError: If the file cannot be read or appended to.
    """
    try:
        existing = rc_file.read_text(encoding="utf-8") if rc_file.exists() else ""
        if marker in existing:
            logger.info("%s already configured", rc_file)
            return False
        with open(rc_file, "a", encoding="utf-8") as f:
            f.write(block)
    except OSError as exc:
        raise InstallIOError(f"Cannot update shell file: {exc}", location=str(rc_file)) from exc

    logger.info("Updated %s", rc_file)
    return True


def write_environment_file(home: Path, token: str, tp_address: str, *, user: str = "") -> Path:
    """Write ``~/.sv2_environment`` with 0600 permissions, owned by ``user``.

    Raises:
        InstallIOError: If the file cannot be written.
    """
    env_file = home / ENV_FILE_NAME
    content = (
        "# SV2 mining environment\n"
        + shell_config_line("bash", env_var=("TOKEN", token)) + "\n"
        + shell_config_line("bash", env_var=("TP_ADDRESS", tp_address)) + "\n"
    )
    try:
        fd = os.open(env_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, ENV_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        env_file.chmod(ENV_FILE_MODE)
    except OSError as exc:
        raise InstallIOError(f"Cannot write environment file: {exc}", location=str(env_file)) from exc

    chown_to_user(env_file, user)
    logger.info("Environment variables saved to %s", env_file)
    return env_file


def persist_environment(
    home: Path,
    os_kind: OsKind,
    *,
    token: str,
    tp_address: str,
    user: str = "",
) -> dict:
    """Write the environment file and hook it into every shell rc file.

    Returns:
        ``{"env_file": Path, "updated": [Path, ...]}``

    Raises:
        InstallIOError: If the environment file or an rc file cannot be written.
    """
    env_file = write_environment_file(home, token, tp_address, user=user)
    source_line = f"source {env_file}"
    block = (
        "\n# Source SV2 environment variables\n"
        f"if [ -f {env_file} ]; then\n"
        f"    {source_line}\n"
        "fi\n"
    )
    updated = [
        rc for rc in shell_rc_files(home, os_kind)
        if append_once(rc, source_line, block)
    ]
    return {"env_file": env_file, "updated": updated}


def ensure_path_entry(home: Path, os_kind: OsKind, directory: Path) -> list[Path]:
    """Make sure ``directory`` is on PATH for future shells.

    Returns:
        The rc files that were changed.
    """
    if str(directory) in os.environ.get("PATH", "").split(os.pathsep):
        return []

    try:
        entry = "$HOME/" + str(directory.relative_to(home))
    except ValueError:
        entry = str(directory)
    line = shell_config_line("bash", path_entry=entry)
    block = f"\n{line}\n"

    rc_files = shell_rc_files(home, os_kind)
    if not rc_files:
        rc_files = [home / (".zshrc" if os_kind is OsKind.MACOS else ".bashrc")]
    return [rc for rc in rc_files if append_once(rc, line, block)]

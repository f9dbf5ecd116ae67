"""
L4 Execution — Node data directory and ``bitcoin.conf``.

The data directory is per-user (``~/.bitcoin-sv2tp`` on Linux,
``~/Library/Application Support/Bitcoin-sv2tp`` on macOS). The config
file holds a freshly generated RPC password and is written 0600.
"""

from __future__ import annotations

import logging
import os
import secrets
import string
from pathlib import Path

from sv2_installer.core.models.platform import HostContext, OsKind
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.domain.errors import InstallIOError
from sv2_installer.core.services.release.execution.ownership import chown_to_user

logger = logging.getLogger(__name__)

DATA_DIR_MODE = 0o750
CONFIG_MODE = 0o600
RPC_USER = "sv2rpcuser"
RPC_PASSWORD_LENGTH = 24

# Template Provider behaviour
SV2_INTERVAL = 10
SV2_FEE_DELTA = 200_000


def data_dir_for(ctx: HostContext) -> Path:
    if ctx.os is OsKind.MACOS:
        return ctx.home_dir / "Library" / "Application Support" / "Bitcoin-sv2tp"
    return ctx.home_dir / ".bitcoin-sv2tp"


def generate_rpc_password(length: int = RPC_PASSWORD_LENGTH) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def ensure_data_dir(ctx: HostContext) -> Path:
    """Create the node data directory (0750) if it does not exist.

    Raises:
        InstallIOError: If the directory cannot be created.
    """
    data_dir = data_dir_for(ctx)
    if data_dir.is_dir():
        logger.info("Data directory already exists: %s", data_dir)
        return data_dir

    try:
        data_dir.mkdir(parents=True)
        data_dir.chmod(DATA_DIR_MODE)
    except OSError as exc:
        raise InstallIOError(f"Cannot create data directory: {exc}", location=str(data_dir)) from exc
    chown_to_user(data_dir, ctx.user)
    logger.info("Created data directory: %s", data_dir)
    return data_dir


def render_bitcoin_conf(settings: InstallerSettings, rpc_password: str) -> str:
    return f"""\
# Basic Bitcoin Core settings
server=1
txindex=1

# RPC settings
rpcuser={RPC_USER}
rpcpassword={rpc_password}
rpcallowip=127.0.0.1
rpcport={settings.rpc_port}

# SV2 specific settings
sv2=1
sv2port={settings.sv2_port}
sv2bind=0.0.0.0
sv2interval={SV2_INTERVAL}
sv2feedelta={SV2_FEE_DELTA}

# Connection settings
port={settings.p2p_port}
listen=1
"""


def write_bitcoin_conf(
    ctx: HostContext,
    settings: InstallerSettings,
    data_dir: Path,
    *,
    rpc_password: str | None = None,
) -> dict:
    """Write ``<data_dir>/bitcoin.conf`` (0600).

    Returns:
        ``{"path": Path, "rpc_user": str, "rpc_password": str}``

    Raises:
        InstallIOError: If the file cannot be written.
    """
    password = rpc_password or generate_rpc_password()
    conf_path = data_dir / "bitcoin.conf"
    content = render_bitcoin_conf(settings, password)

    try:
        fd = os.open(conf_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        conf_path.chmod(CONFIG_MODE)
    except OSError as exc:
        raise InstallIOError(f"Cannot write config file: {exc}", location=str(conf_path)) from exc

    chown_to_user(conf_path, ctx.user)
    logger.info("Configuration file created: %s", conf_path)
    return {"path": conf_path, "rpc_user": RPC_USER, "rpc_password": password}

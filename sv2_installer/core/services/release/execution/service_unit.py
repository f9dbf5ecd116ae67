"""
L4 Execution — Daemon service definitions.

Linux gets a systemd unit under ``/etc/systemd/system``; macOS gets a
per-user LaunchAgent plist. Rendering is pure; writing and registering
go through the file system and ``run_command``.
"""

from __future__ import annotations

import logging
import plistlib
import shutil
from dataclasses import dataclass
from pathlib import Path

from sv2_installer.core.models.platform import HostContext, OsKind
from sv2_installer.core.services.release.data.constants import BINARY_SUFFIX, NODE_CLI, NODE_DAEMON
from sv2_installer.core.services.release.domain.errors import InstallIOError
from sv2_installer.core.services.release.execution.ownership import chown_to_user
from sv2_installer.core.services.release.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

SYSTEMD_SERVICE_NAME = "bitcoind-sv2tp.service"
SYSTEMD_UNIT_DIR = Path("/etc/systemd/system")
LAUNCHD_LABEL_PREFIX = "com.bitcoinsv2.bitcoind"
SERVICE_FILE_MODE = 0o644


@dataclass(frozen=True)
class ServiceSpec:
    """Where the daemon lives and which data directory it runs against."""

    install_dir: Path
    data_dir: Path
    user: str
    home_dir: Path
    suffix: str = BINARY_SUFFIX

    @property
    def daemon(self) -> Path:
        return self.install_dir / f"{NODE_DAEMON}{self.suffix}"

    @property
    def cli(self) -> Path:
        return self.install_dir / f"{NODE_CLI}{self.suffix}"

    @property
    def conf(self) -> Path:
        return self.data_dir / "bitcoin.conf"

    @property
    def launchd_label(self) -> str:
        return f"{LAUNCHD_LABEL_PREFIX}.{self.user}"


def _detect_init_system() -> str:
    """Detect the init system (systemd, launchd, or unknown)."""
    if Path("/run/systemd/system").exists():
        return "systemd"
    if shutil.which("launchctl"):
        return "launchd"
    return "unknown"


# ── Rendering ───────────────────────────────────────────────────


def render_systemd_unit(spec: ServiceSpec) -> str:
    conf_args = f"-conf={spec.conf} -datadir={spec.data_dir}"
    return f"""\
[Unit]
Description=Bitcoin SV2 Template Provider Daemon (Patched)
After=network.target

[Service]
User={spec.user}
Group={spec.user}
Type=forking
ExecStart={spec.daemon} -daemon {conf_args}
ExecStop={spec.cli} {conf_args} stop
Restart=on-failure
TimeoutStartSec=infinity
TimeoutStopSec=600

# Hardening measures
PrivateTmp=true
ProtectSystem=full
NoNewPrivileges=true
PrivateDevices=true

[Install]
WantedBy=multi-user.target
"""


def launchd_plist_path(spec: ServiceSpec) -> Path:
    return spec.home_dir / "Library" / "LaunchAgents" / f"{spec.launchd_label}.plist"


def render_launchd_plist(spec: ServiceSpec, *, sv2_port: int = 8442) -> bytes:
    logs = spec.home_dir / "Library" / "Logs"
    payload = {
        "Label": spec.launchd_label,
        "ProgramArguments": [
            str(spec.daemon),
            f"-conf={spec.conf}",
            f"-datadir={spec.data_dir}",
            "-sv2",
            f"-sv2port={sv2_port}",
            "-sv2bind=0.0.0.0",
            "-sv2interval=10",
            "-sv2feedelta=200000",
        ],
        "RunAtLoad": True,
        "KeepAlive": {"SuccessfulExit": False},
        "StandardOutPath": str(logs / f"{spec.launchd_label}.out.log"),
        "StandardErrorPath": str(logs / f"{spec.launchd_label}.err.log"),
        "WorkingDirectory": str(spec.home_dir),
    }
    return plistlib.dumps(payload)


# ── Writing & registration ──────────────────────────────────────


def write_service(
    ctx: HostContext,
    spec: ServiceSpec,
    *,
    sv2_port: int = 8442,
    unit_dir: Path = SYSTEMD_UNIT_DIR,
) -> Path:
    """Write the service definition for the host OS.

    Returns:
        Path of the unit or plist file.

    Raises:
        InstallIOError: If the file cannot be written.
    """
    if ctx.os is OsKind.MACOS:
        path = launchd_plist_path(spec)
        data: bytes = render_launchd_plist(spec, sv2_port=sv2_port)
    else:
        path = unit_dir / SYSTEMD_SERVICE_NAME
        data = render_systemd_unit(spec).encode("utf-8")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        path.chmod(SERVICE_FILE_MODE)
    except OSError as exc:
        raise InstallIOError(f"Cannot write service file: {exc}", location=str(path)) from exc

    if ctx.os is OsKind.MACOS:
        chown_to_user(path, spec.user)
    logger.info("Created service file: %s", path)
    return path


def register_service(ctx: HostContext) -> dict:
    """Enable the service so it starts at boot (systemd) or login (launchd).

    launchd agents are registered on load, so macOS has nothing to do here.
    """
    if ctx.os is OsKind.MACOS:
        return {"ok": True, "skipped": True}

    if _detect_init_system() != "systemd":
        logger.warning("systemd not running; skipping service registration")
        return {"ok": False, "error": "systemd is not the init system"}

    for cmd in (["systemctl", "daemon-reload"], ["systemctl", "enable", SYSTEMD_SERVICE_NAME]):
        result = run_command(cmd, timeout=30)
        if not result["ok"]:
            return result
    logger.info("%s enabled to start at boot", SYSTEMD_SERVICE_NAME)
    return {"ok": True}


def start_service(ctx: HostContext, service_path: Path) -> dict:
    if ctx.os is OsKind.MACOS:
        # Reload in case an older definition is already loaded
        run_command(["launchctl", "unload", str(service_path)], timeout=30)
        return run_command(["launchctl", "load", "-w", str(service_path)], timeout=30)
    return run_command(["systemctl", "start", SYSTEMD_SERVICE_NAME], timeout=60)

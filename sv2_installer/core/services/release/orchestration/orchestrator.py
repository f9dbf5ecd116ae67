"""
L5 Orchestration — Top-level install and update flows.

These functions tie everything together: resolve the release, ask the
operator whatever needs asking (through an injected ``DecisionProvider``),
run the install pipeline, then the post-install collaborators.

    node install  resolve → variant → artifact → install → data dir →
                  bitcoin.conf → service → environment → (start)
    node update   installed version vs latest → install if different
    proxy install releases/latest → prebuilt (or source build) → PATH → TOKEN
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from sv2_installer.core.models.artifact import InstallResult
from sv2_installer.core.models.platform import HostContext
from sv2_installer.core.models.release import ReleaseSelection, Variant, format_version
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.detection.feed import fetch_latest_release
from sv2_installer.core.services.release.detection.installed_version import get_installed_version
from sv2_installer.core.services.release.domain.artifact import resolve_artifact
from sv2_installer.core.services.release.domain.errors import (
    NoArtifactError,
    ReleaseError,
)
from sv2_installer.core.services.release.execution.config_writer import (
    ensure_data_dir,
    write_bitcoin_conf,
)
from sv2_installer.core.services.release.execution.environment_file import (
    append_once,
    ensure_path_entry,
    persist_environment,
    shell_config_line,
    shell_rc_files,
)
from sv2_installer.core.services.release.execution.pipeline import install
from sv2_installer.core.services.release.execution.proxy import (
    ProxyMethod,
    build_from_source,
    install_prebuilt,
    proxy_asset_names,
)
from sv2_installer.core.services.release.execution.service_unit import (
    SYSTEMD_UNIT_DIR,
    ServiceSpec,
    register_service,
    start_service,
    write_service,
)
from sv2_installer.core.services.release.resolver.version_resolution import (
    ExistsFn,
    resolve_latest_version,
)

logger = logging.getLogger(__name__)


class DecisionProvider(Protocol):
    """Every interactive choice a flow may need."""

    def choose_variant(self, selection: ReleaseSelection) -> Variant: ...

    def confirm(self, question: str, default: bool = False) -> bool: ...

    def ask_token(self) -> str: ...

    def choose_proxy_method(self) -> ProxyMethod: ...


@dataclass
class PresetDecisions:
    """Non-interactive answers (``--yes`` runs, tests)."""

    variant: Variant = Variant.STANDARD
    answer: bool = False
    token: str = ""
    proxy_method: ProxyMethod = ProxyMethod.PREBUILT

    def choose_variant(self, selection: ReleaseSelection) -> Variant:
        return self.variant

    def confirm(self, question: str, default: bool = False) -> bool:
        return self.answer

    def ask_token(self) -> str:
        return self.token

    def choose_proxy_method(self) -> ProxyMethod:
        return self.proxy_method


TOKEN_FORBIDDEN_CHARS = "\"'$`\\"


def validate_token(token: str) -> str:
    """A token is non-empty, has no whitespace and no shell-special quoting.

    The token ends up inside a double-quoted ``export`` line that shells
    source, so quotes, ``$``, backticks and backslashes are refused.

    Raises:
        ValueError: With a message suitable for re-prompting.
    """
    token = token.strip()
    if not token:
        raise ValueError("Token cannot be empty")
    if any(ch.isspace() for ch in token):
        raise ValueError("Token should not contain spaces")
    bad = sorted({ch for ch in token if ch in TOKEN_FORBIDDEN_CHARS})
    if bad:
        raise ValueError(f"Token should not contain {' '.join(bad)}")
    return token


def pick_variant(
    selection: ReleaseSelection,
    decisions: DecisionProvider,
    requested: Variant | None = None,
) -> Variant:
    """Decide which variant to install at the selected version.

    Only variants the selection actually holds are offered; the operator
    is asked only when both exist.

    Raises:
        NoArtifactError: If ``requested`` is not published at this version.
    """
    if requested is not None:
        if not selection.has(requested):
            raise NoArtifactError(
                f"No {requested.value} release published at {selection.version_string}",
            )
        return requested

    if selection.has_both_variants:
        choice = decisions.choose_variant(selection)
        if not selection.has(choice):
            raise NoArtifactError(
                f"No {choice.value} release published at {selection.version_string}",
            )
        return choice

    if not selection.variants:
        return Variant.STANDARD
    return next(iter(selection.variants))


def _install_release(
    ctx: HostContext,
    settings: InstallerSettings,
    selection: ReleaseSelection,
    variant: Variant,
    *,
    work_root: Path | None,
) -> InstallResult:
    tag = selection.tag(variant)
    descriptor = resolve_artifact(
        tag, ctx.platform, host=settings.host, repo=settings.node_repo,
    )
    logger.info("Downloading from %s", descriptor.url)
    return install(
        descriptor,
        install_dir=ctx.install_dir,
        suffix=settings.binary_suffix,
        connect_timeout=settings.connect_timeout,
        download_timeout=settings.download_timeout,
        work_root=work_root,
    )


def setup_node(
    ctx: HostContext,
    settings: InstallerSettings,
    decisions: DecisionProvider,
    *,
    unit_dir: Path = SYSTEMD_UNIT_DIR,
) -> dict[str, Any]:
    """Post-install collaborators: data dir, config, service, environment.

    The token is validated before anything is written.

    Raises:
        ValueError: If the token is unusable.
        InstallIOError: If a file cannot be written.
    """
    token = validate_token(decisions.ask_token())
    data_dir = ensure_data_dir(ctx)
    conf = write_bitcoin_conf(ctx, settings, data_dir)

    spec = ServiceSpec(
        install_dir=ctx.install_dir,
        data_dir=data_dir,
        user=ctx.user,
        home_dir=ctx.home_dir,
        suffix=settings.binary_suffix,
    )
    service_path = write_service(ctx, spec, sv2_port=settings.sv2_port, unit_dir=unit_dir)
    registered = register_service(ctx)
    if not registered.get("ok"):
        logger.warning("Service not registered: %s", registered.get("error", "unknown error"))

    env = persist_environment(
        ctx.home_dir, ctx.os, token=token, tp_address=settings.tp_address, user=ctx.user,
    )

    started: dict[str, Any] | None = None
    if decisions.confirm("Do you want to attempt to start the node now?"):
        started = start_service(ctx, service_path)
        if not started["ok"]:
            logger.error("Failed to start the service: %s", started.get("error"))

    return {
        "data_dir": data_dir,
        "config": conf["path"],
        "rpc_user": conf["rpc_user"],
        "rpc_password": conf["rpc_password"],
        "service": service_path,
        "registered": bool(registered.get("ok")),
        "env_file": env["env_file"],
        "shell_files": env["updated"],
        "started": started,
    }


def install_node(
    ctx: HostContext,
    settings: InstallerSettings,
    decisions: DecisionProvider,
    *,
    variant: Variant | None = None,
    setup: bool = True,
    work_root: Path | None = None,
    unit_dir: Path = SYSTEMD_UNIT_DIR,
    exists: ExistsFn | None = None,
) -> dict[str, Any]:
    """Install the latest patched node, then set it up as a service.

    Returns::

        {
            "ok": bool,
            "selection": ReleaseSelection,
            "variant": Variant,
            "result": InstallResult,
            "setup": {...} | None,
        }

    Raises:
        NoArtifactError: If the requested variant is not published.
        InstallIOError: From post-install setup.
    """
    selection = resolve_latest_version(settings, exists=exists)
    chosen = pick_variant(selection, decisions, variant)
    logger.info("Selected %s (%s)", selection.tag(chosen).name, selection.source.value)

    result = _install_release(ctx, settings, selection, chosen, work_root=work_root)
    out: dict[str, Any] = {
        "ok": result.success,
        "selection": selection,
        "variant": chosen,
        "result": result,
        "setup": None,
    }
    if result.success and setup:
        out["setup"] = setup_node(ctx, settings, decisions, unit_dir=unit_dir)
    return out


def update_node(
    ctx: HostContext,
    settings: InstallerSettings,
    decisions: DecisionProvider,
    *,
    check_only: bool = False,
    variant: Variant | None = None,
    work_root: Path | None = None,
    exists: ExistsFn | None = None,
) -> dict[str, Any]:
    """Reinstall the node only when the installed version differs from latest.

    Returns::

        {
            "ok": bool,
            "installed": "X.Y.Z" | None,
            "latest": "X.Y.Z",
            "up_to_date": bool,
            "result": InstallResult | None,
        }
    """
    installed = get_installed_version(ctx.install_dir, settings.binary_suffix)
    selection = resolve_latest_version(settings, exists=exists)

    out: dict[str, Any] = {
        "ok": True,
        "installed": format_version(installed) if installed else None,
        "latest": selection.version_string,
        "selection": selection,
        "up_to_date": installed == selection.version,
        "result": None,
    }
    logger.info("Installed version: %s", out["installed"] or "none")
    logger.info("Latest available version: %s", out["latest"])

    if out["up_to_date"]:
        logger.info("Already up to date.")
        return out
    if check_only:
        return out

    chosen = pick_variant(selection, decisions, variant)
    result = _install_release(ctx, settings, selection, chosen, work_root=work_root)
    out["ok"] = result.success
    out["result"] = result
    return out


def install_proxy(
    ctx: HostContext,
    settings: InstallerSettings,
    decisions: DecisionProvider,
    *,
    work_root: Path | None = None,
) -> dict[str, Any]:
    """Install the proxy client into ``~/.local/bin`` (or the configured dir).

    Prebuilt first when chosen; a failed prebuilt install falls back to a
    source build if the operator agrees.

    Raises:
        PlatformError: Unsupported architecture.
        ProxyInstallError: Neither strategy produced a binary.
    """
    # Fail fast on unsupported arches before any network call
    proxy_asset_names(ctx.platform)

    install_dir = settings.proxy_install_dir or ctx.home_dir / ".local" / "bin"
    method = decisions.choose_proxy_method()
    path: Path | None = None
    version = ""

    if method is ProxyMethod.PREBUILT:
        try:
            release = fetch_latest_release(
                settings.proxy_repo, api_host=settings.api_host, timeout=settings.feed_timeout,
            )
            version = release.get("tag_name") or ""
            logger.info("Found latest version: %s", version or "unknown")
            path = install_prebuilt(
                release,
                ctx.platform,
                install_dir,
                connect_timeout=settings.connect_timeout,
                download_timeout=settings.download_timeout,
                work_root=work_root,
            )
        except ReleaseError as exc:
            logger.error("Prebuilt install failed at %s: %s", exc.stage, exc.message)
            if not decisions.confirm("Try building from source instead?"):
                raise

    if path is None:
        path = build_from_source(install_dir, work_root=work_root)
        method = ProxyMethod.SOURCE

    path_files = ensure_path_entry(ctx.home_dir, ctx.os, install_dir)

    token_files: list[Path] = []
    token = validate_token(decisions.ask_token())
    if decisions.confirm("Add TOKEN to your shell configuration?"):
        line = shell_config_line("bash", env_var=("TOKEN", token))
        rc_files = shell_rc_files(ctx.home_dir, ctx.os) or [ctx.home_dir / ".bashrc"]
        token_files = [rc for rc in rc_files if append_once(rc, line, f"\n{line}\n")]

    return {
        "ok": True,
        "method": method,
        "version": version,
        "path": path,
        "path_files": path_files,
        "token_files": token_files,
    }

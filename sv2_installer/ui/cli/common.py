"""
Shared helpers for the CLI command groups.

Loading settings, building the host context and printing failures are
the same for every command, so they live here.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from sv2_installer.core.config.loader import ConfigError, load_settings
from sv2_installer.core.models.platform import HostContext
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.detection.platform import build_host_context
from sv2_installer.core.services.release.domain.errors import ReleaseError
from sv2_installer.core.services.release.orchestration.orchestrator import validate_token


def fail(stage: str, message: str, location: str = "") -> NoReturn:
    """Print a diagnostic naming the stage and the last URL/path, then exit 1."""
    click.secho(f"❌ {stage}: {message}", fg="red", err=True)
    if location:
        click.echo(f"   Last attempted: {location}", err=True)
    sys.exit(1)


def fail_release(exc: ReleaseError) -> NoReturn:
    fail(exc.stage, exc.message, exc.location)


def checked_token(token: str) -> str:
    """Validate a token given on the command line before any work starts."""
    try:
        return validate_token(token)
    except ValueError as e:
        fail("configuration", f"--token: {e}")


def load(ctx: click.Context, *, install_dir: str | None = None) -> InstallerSettings:
    """Load settings for this invocation, applying a ``--install-dir`` override."""
    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        fail("configuration", str(e))
    if install_dir:
        settings = settings.model_copy(update={"install_dir": Path(install_dir)})
    return settings


def host_context(settings: InstallerSettings) -> HostContext:
    try:
        return build_host_context(settings)
    except ReleaseError as exc:
        fail_release(exc)


def echo_json(data: dict) -> None:
    click.echo(json.dumps(data, indent=2, default=str))

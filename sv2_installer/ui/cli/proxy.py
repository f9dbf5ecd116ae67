"""
CLI commands for the proxy client (demand-cli).

Thin wrappers over ``sv2_installer.core.services.release``.
"""

from __future__ import annotations

from pathlib import Path

import click

from sv2_installer.core.services.release.domain.errors import ReleaseError
from sv2_installer.core.services.release.execution.proxy import ProxyMethod
from sv2_installer.ui.cli.common import (
    checked_token,
    echo_json,
    fail,
    fail_release,
    host_context,
    load,
)


@click.group()
def proxy() -> None:
    """Proxy client — install."""


@proxy.command()
@click.option(
    "--method",
    type=click.Choice([m.value for m in ProxyMethod]),
    default=None,
    help="Install from a prebuilt binary or build from source.",
)
@click.option("--install-dir", default=None, help="Override the install directory (default: ~/.local/bin).")
@click.option("--token", default=None, help="DMND account TOKEN.")
@click.option("--yes", "-y", is_flag=True, help="Non-interactive: take defaults, do not prompt.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    method: str | None,
    install_dir: str | None,
    token: str | None,
    yes: bool,
    as_json: bool,
) -> None:
    """Install the latest proxy client release."""
    from sv2_installer.core.services.release.orchestration.orchestrator import (
        PresetDecisions,
        install_proxy,
    )
    from sv2_installer.ui.cli.prompts import ClickDecisionProvider

    settings = load(ctx)
    if install_dir:
        settings = settings.model_copy(update={"proxy_install_dir": Path(install_dir)})
    host = host_context(settings)
    chosen = ProxyMethod(method) if method else None

    if yes:
        if not token:
            fail("configuration", "--yes needs --token")
        token = checked_token(token)
        decisions = PresetDecisions(
            answer=True, token=token, proxy_method=chosen or ProxyMethod.PREBUILT,
        )
    else:
        decisions = ClickDecisionProvider(token=token, method=chosen)

    try:
        out = install_proxy(host, settings, decisions)
    except ReleaseError as exc:
        fail_release(exc)
    except ValueError as e:
        fail("environment", str(e))

    if as_json:
        echo_json({
            "method": out["method"].value,
            "version": out["version"],
            "path": str(out["path"]),
            "path_files": [str(p) for p in out["path_files"]],
            "token_files": [str(p) for p in out["token_files"]],
        })
        return

    how = "built from source" if out["method"] is ProxyMethod.SOURCE else "prebuilt"
    click.secho(f"✅ Proxy client installed ({how}): {out['path']}", fg="green", bold=True)
    for rc in out["path_files"]:
        click.echo(f"   PATH updated in {rc}")
    for rc in out["token_files"]:
        click.echo(f"   TOKEN added to {rc}")
    if not out["token_files"]:
        click.echo("   Set the TOKEN for this session with: export TOKEN=\"<your token>\"")
    click.echo()

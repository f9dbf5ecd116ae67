"""
CLI commands for the patched SV2 Template Provider node.

Thin wrappers over ``sv2_installer.core.services.release``.
"""

from __future__ import annotations

import sys

import click

from sv2_installer.core.models.release import SelectionSource, Variant
from sv2_installer.core.services.release.domain.errors import ReleaseError
from sv2_installer.ui.cli.common import (
    checked_token,
    echo_json,
    fail,
    fail_release,
    host_context,
    load,
)

_VARIANTS = click.Choice([v.value for v in Variant])


@click.group()
def node() -> None:
    """Patched node — latest, platform, install, update, deps."""


# ── Detect ──────────────────────────────────────────────────────


@node.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def latest(ctx: click.Context, as_json: bool) -> None:
    """Show the newest published release."""
    from sv2_installer.core.services.release.resolver.version_resolution import (
        resolve_latest_version,
    )

    settings = load(ctx)
    selection = resolve_latest_version(settings)

    if as_json:
        echo_json(selection.to_dict())
        return

    click.secho(f"📦 Latest release: v{selection.version_string}", fg="cyan", bold=True)
    for variant in sorted(selection.variants):
        click.echo(f"   • {selection.tag(variant).name}")
    if selection.source is SelectionSource.DEFAULT:
        click.secho("   ⚠️  Tag feed and probes failed; this is the built-in default", fg="yellow")
    elif selection.source is SelectionSource.PROBE:
        click.echo("   ℹ️  Found by probing known versions")


@node.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def platform(ctx: click.Context, as_json: bool) -> None:
    """Show the detected platform and install locations."""
    settings = load(ctx)
    host = host_context(settings)

    if as_json:
        echo_json(host.to_dict())
        return

    click.secho(f"🖥️  Platform: {host.platform.label}", fg="cyan", bold=True)
    click.echo(f"   OS:          {host.os.value} ({host.distro or 'unknown distro'})")
    click.echo(f"   Arch:        {host.arch.value}")
    click.echo(f"   User:        {host.user}")
    click.echo(f"   Home:        {host.home_dir}")
    click.echo(f"   Install dir: {host.install_dir}")


@node.command()
@click.option("--source-build", is_flag=True, help="Also check git and cargo.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deps(ctx: click.Context, source_build: bool, as_json: bool) -> None:
    """Check required command-line tools."""
    from sv2_installer.core.services.release.detection.system_deps import check_required_tools

    settings = load(ctx)
    host = host_context(settings)
    result = check_required_tools(host.distro, include_source_build=source_build)

    if as_json:
        echo_json(result)
        if not result["ok"]:
            sys.exit(1)
        return

    for capability, path in result["found"].items():
        click.echo(f"   ✅ {capability}: {path}")
    if result["ok"]:
        click.secho("✅ All required tools found", fg="green")
        return

    click.secho(f"❌ Missing: {', '.join(result['missing'])}", fg="red")
    if result["install_command"]:
        click.echo(f"   Install with: sudo {' '.join(result['install_command'])}")
    else:
        click.echo("   Please install them with your package manager.")
    sys.exit(1)


# ── Act ─────────────────────────────────────────────────────────


@node.command()
@click.option("--variant", type=_VARIANTS, default=None, help="Install this variant without asking.")
@click.option("--install-dir", default=None, help="Override the install directory.")
@click.option("--no-setup", is_flag=True, help="Only install binaries (no config, service, env).")
@click.option("--token", default=None, help="Miner TOKEN for the environment file.")
@click.option("--yes", "-y", is_flag=True, help="Non-interactive: take defaults, do not prompt.")
@click.option("--start", is_flag=True, help="With --yes, start the service after setup.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    variant: str | None,
    install_dir: str | None,
    no_setup: bool,
    token: str | None,
    yes: bool,
    start: bool,
    as_json: bool,
) -> None:
    """Install the latest patched node and set it up as a service."""
    from sv2_installer.core.services.release.orchestration.orchestrator import (
        PresetDecisions,
        install_node,
    )
    from sv2_installer.ui.cli.prompts import ClickDecisionProvider

    settings = load(ctx, install_dir=install_dir)
    host = host_context(settings)
    requested = Variant(variant) if variant else None

    if yes:
        if not no_setup and not token:
            fail("configuration", "--yes needs --token (or --no-setup)")
        if token:
            token = checked_token(token)
        decisions = PresetDecisions(
            variant=requested or Variant.STANDARD, answer=start, token=token or "",
        )
    else:
        decisions = ClickDecisionProvider(token=token)

    try:
        out = install_node(host, settings, decisions, variant=requested, setup=not no_setup)
    except ReleaseError as exc:
        fail_release(exc)
    except ValueError as e:
        fail("environment", str(e))

    result = out["result"]
    if as_json:
        echo_json({
            "selection": out["selection"].to_dict(),
            "variant": out["variant"].value,
            "result": result.to_dict(),
            "setup": out["setup"],
        })
        if not result.success:
            sys.exit(1)
        return

    if not result.success:
        fail(result.stage, result.message, result.last_location)

    tag = out["selection"].tag(out["variant"])
    click.secho(f"✅ Installed {tag.name}", fg="green", bold=True)
    for path in result.installed_files:
        click.echo(f"   • {path}")

    setup = out["setup"]
    if setup:
        click.echo()
        click.echo(f"   📁 Data dir:   {setup['data_dir']}")
        click.echo(f"   ⚙️  Config:     {setup['config']}")
        click.echo(f"   🔑 RPC user:   {setup['rpc_user']}")
        click.secho(f"   🔑 RPC pass:   {setup['rpc_password']} (save this securely!)", fg="yellow")
        click.echo(f"   🛠️  Service:    {setup['service']}")
        click.echo(f"   🌱 Env file:   {setup['env_file']}")
        if setup["started"] is not None:
            if setup["started"]["ok"]:
                click.secho("   ▶️  Service started", fg="green")
            else:
                click.secho(f"   ❌ Service start failed: {setup['started'].get('error')}", fg="red")
    click.echo()


@node.command()
@click.option("--check", "check_only", is_flag=True, help="Only report whether an update exists.")
@click.option("--variant", type=_VARIANTS, default=None, help="Install this variant without asking.")
@click.option("--install-dir", default=None, help="Override the install directory.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def update(
    ctx: click.Context,
    check_only: bool,
    variant: str | None,
    install_dir: str | None,
    as_json: bool,
) -> None:
    """Update the installed node if a newer release is published."""
    from sv2_installer.core.services.release.orchestration.orchestrator import update_node
    from sv2_installer.ui.cli.prompts import ClickDecisionProvider

    settings = load(ctx, install_dir=install_dir)
    host = host_context(settings)
    requested = Variant(variant) if variant else None

    try:
        out = update_node(
            host, settings, ClickDecisionProvider(), check_only=check_only, variant=requested,
        )
    except ReleaseError as exc:
        fail_release(exc)

    result = out["result"]
    if as_json:
        echo_json({
            "installed": out["installed"],
            "latest": out["latest"],
            "up_to_date": out["up_to_date"],
            "result": result.to_dict() if result else None,
        })
        if result is not None and not result.success:
            sys.exit(1)
        return

    click.echo(f"Installed version: {out['installed'] or 'not installed'}")
    click.echo(f"Latest available version: {out['latest']}")

    if out["up_to_date"]:
        click.secho("✅ Already up to date.", fg="green")
        return
    if result is None:
        click.secho("⬆️  Update available", fg="yellow")
        return
    if not result.success:
        fail(result.stage, result.message, result.last_location)
    click.secho("✅ Update complete.", fg="green")

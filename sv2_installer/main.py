"""
sv2-installer — CLI entrypoint.

Usage:
    python -m sv2_installer.main --help
    python -m sv2_installer.main node latest
    python -m sv2_installer.main node install
    python -m sv2_installer.main proxy install
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from sv2_installer import __version__
from sv2_installer.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_console_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="sv2-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to sv2-installer.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """sv2-installer — install and update the SV2 Template Provider node and proxy client."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_console_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


# ── Sub-groups ──────────────────────────────────────────────────

from sv2_installer.ui.cli.node import node
from sv2_installer.ui.cli.proxy import proxy

cli.add_command(node)
cli.add_command(proxy)


if __name__ == "__main__":
    cli()

"""
Interactive decision provider backed by click prompts.

Any answer given up front on the command line (``--token``,
``--method``) is used as-is instead of prompting.
"""

from __future__ import annotations

import click

from sv2_installer.core.models.release import ReleaseSelection, Variant
from sv2_installer.core.services.release.execution.proxy import ProxyMethod
from sv2_installer.core.services.release.orchestration.orchestrator import validate_token


class ClickDecisionProvider:
    """Asks the operator on the terminal."""

    def __init__(self, *, token: str | None = None, method: ProxyMethod | None = None) -> None:
        self._token = token
        self._method = method

    def choose_variant(self, selection: ReleaseSelection) -> Variant:
        click.echo(f"Both standard and IPC builds are available for v{selection.version_string}.")
        ipc = click.confirm(
            f"Do you want to install the IPC version of v{selection.version_string}?",
            default=False,
        )
        return Variant.IPC if ipc else Variant.STANDARD

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    def ask_token(self) -> str:
        if self._token is not None:
            return self._token
        while True:
            raw = click.prompt("Enter your miner TOKEN", type=str)
            try:
                return validate_token(raw)
            except ValueError as e:
                click.secho(f"⚠️  {e}. Please try again.", fg="yellow")

    def choose_proxy_method(self) -> ProxyMethod:
        if self._method is not None:
            return self._method
        click.echo("How would you like to install the proxy client (demand-cli)?")
        click.echo("   1. Use prebuilt binaries")
        click.echo("   2. Build from source")
        choice = click.prompt("Enter your choice", type=click.Choice(["1", "2"]), default="1")
        return ProxyMethod.SOURCE if choice == "2" else ProxyMethod.PREBUILT

"""
Installer settings — loaded from sv2-installer.yml (all keys optional).

Defaults reproduce the behaviour of the stock install scripts, so the
tool works with no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


def _default_fallback_versions() -> list[str]:
    return ["0.1.17", "0.1.16", "0.1.15", "0.1.14", "0.1.13", "0.1.12"]


class InstallerSettings(BaseModel):
    """Tunable settings for release resolution and installation."""

    # ── Release sources ──────────────────────────────────────────
    host: str = "github.com"
    api_host: str = "api.github.com"
    node_repo: str = "Sjors/bitcoin"
    proxy_repo: str = "demand-open-source/demand-cli"

    # ── Version resolution ───────────────────────────────────────
    fallback_versions: list[str] = Field(default_factory=_default_fallback_versions)
    default_version: str = "0.1.17"

    # ── Placement ────────────────────────────────────────────────
    install_dir: Path = Path("/usr/local/bin")
    proxy_install_dir: Path | None = None  # default: ~/.local/bin
    binary_suffix: str = "-sv2tp"

    # ── Timeouts (seconds) ───────────────────────────────────────
    feed_timeout: float = 30.0
    connect_timeout: float = 30.0
    download_timeout: float = 120.0

    # ── Daemon settings ──────────────────────────────────────────
    tp_address: str = "127.0.0.1:8442"
    sv2_port: int = 8442
    rpc_port: int = 18332
    p2p_port: int = 18333

    @field_validator("node_repo", "proxy_repo")
    @classmethod
    def _check_repo(cls, value: str) -> str:
        owner, sep, name = value.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"repository must be 'owner/name', got {value!r}")
        return value

    @field_validator("fallback_versions")
    @classmethod
    def _check_versions(cls, value: list[str]) -> list[str]:
        for item in value:
            _check_semver(item)
        return value

    @field_validator("default_version")
    @classmethod
    def _check_default(cls, value: str) -> str:
        _check_semver(value)
        return value

    @field_validator("feed_timeout", "connect_timeout", "download_timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value


def _check_semver(value: str) -> None:
    parts = value.split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"version must be X.Y.Z, got {value!r}")

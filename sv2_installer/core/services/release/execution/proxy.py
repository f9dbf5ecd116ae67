"""
L4 Execution — Proxy client (demand-cli) installation.

Two strategies, both ending in the same atomic placement as the node:

    prebuilt  releases/latest → pick asset → download → verify digest → place
    source    git clone → cargo build --release → place target/release binary

Only x86_64 and aarch64 builds exist.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from enum import StrEnum
from pathlib import Path

from sv2_installer.core.models.platform import Arch, PlatformTriple
from sv2_installer.core.services.release.data.constants import (
    PROXY_ASSET_ALTERNATES,
    PROXY_BINARY,
    PROXY_GIT_URL,
)
from sv2_installer.core.services.release.domain.errors import (
    DownloadError,
    PlatformError,
    ProxyInstallError,
)
from sv2_installer.core.services.release.execution.download import download_file, verify_checksum
from sv2_installer.core.services.release.execution.placement import place_files
from sv2_installer.core.services.release.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

SUPPORTED_PROXY_ARCHES = (Arch.X86_64, Arch.AARCH64)
BUILD_TIMEOUT = 3600


class ProxyMethod(StrEnum):
    PREBUILT = "prebuilt"
    SOURCE = "source"


def proxy_asset_names(platform: PlatformTriple) -> list[str]:
    """Asset names to look for, most specific first.

    Raises:
        PlatformError: For architectures without proxy builds.
    """
    if platform.arch not in SUPPORTED_PROXY_ARCHES:
        raise PlatformError(f"Unsupported architecture for the proxy client: {platform.arch.value}")

    names = [f"{PROXY_BINARY}-{platform.os.value}-{platform.arch.value}"]
    alternate = PROXY_ASSET_ALTERNATES.get((platform.os.value, platform.arch.value))
    if alternate:
        names.append(alternate)
    return names


def select_proxy_asset(release: dict, platform: PlatformTriple) -> dict | None:
    """Pick the matching asset from ``releases/latest`` metadata.

    Returns:
        ``{"name", "url", "digest"}`` or None when no asset matches.
    """
    assets = release.get("assets") or []
    by_name = {
        a.get("name"): a for a in assets
        if isinstance(a, dict) and a.get("browser_download_url")
    }
    for name in proxy_asset_names(platform):
        asset = by_name.get(name)
        if asset is not None:
            return {
                "name": name,
                "url": asset["browser_download_url"],
                "digest": asset.get("digest") or "",
            }
    return None


def install_prebuilt(
    release: dict,
    platform: PlatformTriple,
    install_dir: Path,
    *,
    connect_timeout: float = 30.0,
    download_timeout: float = 120.0,
    work_root: Path | None = None,
) -> Path:
    """Download the release binary and install it as ``demand-cli``.

    Raises:
        PlatformError: Unsupported architecture.
        ProxyInstallError: No matching asset in the release.
        DownloadError: Transfer failure or digest mismatch.
        InstallIOError: Placement failure.
    """
    version = release.get("tag_name") or "unknown"
    asset = select_proxy_asset(release, platform)
    if asset is None:
        raise ProxyInstallError(
            f"No prebuilt {PROXY_BINARY} asset for {platform.os.value}-{platform.arch.value} "
            f"in release {version}",
            location=release.get("html_url", ""),
        )

    logger.info("Downloading %s %s (%s)", PROXY_BINARY, version, asset["name"])
    with tempfile.TemporaryDirectory(prefix="sv2-proxy-", dir=work_root) as work:
        binary = download_file(
            asset["url"],
            Path(work) / asset["name"],
            connect_timeout=connect_timeout,
            total_timeout=download_timeout,
        )
        if asset["digest"] and not verify_checksum(binary, asset["digest"]):
            raise DownloadError("Checksum mismatch for downloaded binary", location=asset["url"])
        placed = place_files([(binary, PROXY_BINARY)], install_dir)

    logger.info("Binary installed to %s", placed[0])
    return placed[0]


def build_from_source(
    install_dir: Path,
    *,
    git_url: str = PROXY_GIT_URL,
    work_root: Path | None = None,
) -> Path:
    """Clone and build the proxy client with cargo, then install it.

    Raises:
        ProxyInstallError: Missing toolchain, clone or build failure.
        InstallIOError: Placement failure.
    """
    for tool in ("git", "cargo"):
        if not shutil.which(tool):
            raise ProxyInstallError(f"{tool} not found on PATH; cannot build from source")

    with tempfile.TemporaryDirectory(prefix="sv2-proxy-build-", dir=work_root) as work:
        checkout = Path(work) / PROXY_BINARY
        logger.info("Cloning %s", git_url)
        result = run_command(["git", "clone", "--depth", "1", git_url, str(checkout)], timeout=600)
        if not result["ok"]:
            raise ProxyInstallError(f"git clone failed: {result['error']}", location=git_url)

        logger.info("Building with cargo in %s (this may take a few minutes)", checkout)
        result = run_command(["cargo", "build", "--release"], timeout=BUILD_TIMEOUT, cwd=str(checkout))
        if not result["ok"]:
            raise ProxyInstallError(f"cargo build failed: {result['error']}", location=str(checkout))

        built = checkout / "target" / "release" / PROXY_BINARY
        if not built.is_file():
            raise ProxyInstallError("Build finished but produced no binary", location=str(built))
        placed = place_files([(built, PROXY_BINARY)], install_dir)

    logger.info("Built and installed %s", placed[0])
    return placed[0]

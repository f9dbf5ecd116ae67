"""
L0 Data — Release-source constants.

Hosts, tag grammar, artifact naming, and tool requirement tables.
Pure data, no logic. Most values can be overridden via InstallerSettings.
"""

from __future__ import annotations

import re

# ── Hosting ──────────────────────────────────────────────────────

DEFAULT_HOST = "github.com"
DEFAULT_API_HOST = "api.github.com"
NODE_REPO = "Sjors/bitcoin"
PROXY_REPO = "demand-open-source/demand-cli"

USER_AGENT = "sv2-installer/1.0"
API_ACCEPT = "application/vnd.github.v3+json"

# ── Tag grammar ──────────────────────────────────────────────────

TAG_PREFIX = "sv2-tp"
IPC_MARKER = "ipc"
TAG_PATTERN = re.compile(r"^sv2-tp(-ipc)?-(\d+)\.(\d+)\.(\d+)$")

# Text fallback when the feed body is not valid JSON
TAG_NAME_SCAN = re.compile(r'"name"\s*:\s*"(sv2-tp(?:-ipc)?-\d+\.\d+\.\d+)"')

# ── Version fallback ─────────────────────────────────────────────

FALLBACK_VERSIONS: tuple[str, ...] = (
    "0.1.17", "0.1.16", "0.1.15", "0.1.14", "0.1.13", "0.1.12",
)
DEFAULT_VERSION = "0.1.17"

# ── Artifacts ────────────────────────────────────────────────────

ARTIFACT_PREFIX = "bitcoin-sv2-tp"
ARTIFACT_EXTENSION = ".tar.gz"
BINARY_SUFFIX = "-sv2tp"
EXTRACT_DIR_PREFIXES = ("bitcoin-", "sv2-")

NODE_DAEMON = "bitcoind"
NODE_CLI = "bitcoin-cli"

# Archive safety limits
MAX_ARCHIVE_ENTRIES = 5000
MAX_ARCHIVE_TOTAL_BYTES = 2 * 1024 * 1024 * 1024  # 2 GiB

DOWNLOAD_CHUNK = 64 * 1024

# ── Proxy client ─────────────────────────────────────────────────

PROXY_BINARY = "demand-cli"
PROXY_GIT_URL = "https://github.com/demand-open-source/demand-cli.git"

# Alternate asset names, tried after demand-cli-<os>-<arch>
PROXY_ASSET_ALTERNATES: dict[tuple[str, str], str] = {
    ("macos", "x86_64"): "demand-cli-darwin-amd64",
    ("macos", "aarch64"): "demand-cli-darwin-arm64",
    ("linux", "x86_64"): "demand-cli-linux-amd64",
}

# ── Required command-line tools ──────────────────────────────────
# Abstract capability → concrete binary on PATH.

REQUIRED_TOOLS: dict[str, str] = {
    "download-tool": "curl",
    "archive-tool": "tar",
}

SOURCE_BUILD_TOOLS: dict[str, str] = {
    "vcs-tool": "git",
    "rust-build-tool": "cargo",
}

# Package names per distro family for each binary.
PACKAGE_NAMES: dict[str, dict[str, str]] = {
    "debian": {"curl": "curl", "tar": "tar", "git": "git", "cargo": "cargo"},
    "rhel": {"curl": "curl", "tar": "tar", "git": "git", "cargo": "cargo"},
    "arch": {"curl": "curl", "tar": "tar", "git": "git", "cargo": "rust"},
    "macos": {"curl": "curl", "tar": "gnu-tar", "git": "git", "cargo": "rust"},
}

DISTRO_FAMILIES: dict[str, str] = {
    "ubuntu": "debian",
    "debian": "debian",
    "pop": "debian",
    "mint": "debian",
    "linuxmint": "debian",
    "elementary": "debian",
    "raspbian": "debian",
    "fedora": "rhel",
    "centos": "rhel",
    "rhel": "rhel",
    "rocky": "rhel",
    "almalinux": "rhel",
    "arch": "arch",
    "manjaro": "arch",
    "endeavouros": "arch",
}

INSTALL_COMMANDS: dict[str, list[str]] = {
    "debian": ["apt-get", "install", "-y"],
    "rhel": ["dnf", "install", "-y"],
    "arch": ["pacman", "-Sy", "--noconfirm"],
    "macos": ["brew", "install"],
}

"""
Configuration loader — reads sv2-installer.yml into InstallerSettings.

The file is optional: when none is found, defaults apply. When one is
given or found, it is read as YAML, validated against the Pydantic
schema, and returned as a typed settings object.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from sv2_installer.core.models.settings import InstallerSettings

logger = logging.getLogger(__name__)

# Default config filename
SETTINGS_FILE = "sv2-installer.yml"

# Environment override for the node install directory
INSTALL_DIR_ENV = "SV2_INSTALL_DIR"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or unreadable."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for sv2-installer.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to sv2-installer.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> InstallerSettings:
    """Load and validate installer settings.

    Args:
        path: Explicit path to sv2-installer.yml. If None, searches upward
            and falls back to defaults when nothing is found.

    Returns:
        Validated InstallerSettings.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_settings_file()

    data: dict = {}
    if path is None:
        logger.debug("No %s found, using defaults", SETTINGS_FILE)
    elif not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
    else:
        data = _read_yaml(path)

    override = os.environ.get(INSTALL_DIR_ENV)
    if override:
        logger.debug("Install directory overridden by %s=%s", INSTALL_DIR_ENV, override)
        data["install_dir"] = override

    try:
        settings = InstallerSettings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info(
        "Loaded settings: node=%s proxy=%s install_dir=%s",
        settings.node_repo, settings.proxy_repo, settings.install_dir,
    )
    return settings


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading installer settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "installer" key or be flat
    if isinstance(data.get("installer"), dict):
        data = data["installer"]

    return dict(data)

"""
Tests for configuration loading — sv2-installer.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from sv2_installer.core.config.loader import (
    INSTALL_DIR_ENV,
    ConfigError,
    find_settings_file,
    load_settings,
)
from sv2_installer.core.models.settings import InstallerSettings


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(INSTALL_DIR_ENV, raising=False)


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content))
    return path


class TestDefaults:
    def test_no_file_uses_defaults(self):
        settings = load_settings()
        assert settings == InstallerSettings()
        assert settings.install_dir == Path("/usr/local/bin")
        assert settings.node_repo == "Sjors/bitcoin"
        assert settings.fallback_versions[0] == "0.1.17"

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")


class TestLoadSettings:
    def test_flat_file(self, tmp_path: Path):
        path = _write(tmp_path / "sv2-installer.yml", """\
            install_dir: /opt/sv2/bin
            node_repo: me/bitcoin
            fallback_versions: ["0.2.0", "0.1.17"]
            download_timeout: 300
        """)
        settings = load_settings(path)
        assert settings.install_dir == Path("/opt/sv2/bin")
        assert settings.node_repo == "me/bitcoin"
        assert settings.fallback_versions == ["0.2.0", "0.1.17"]
        assert settings.download_timeout == 300

    def test_wrapped_under_installer_key(self, tmp_path: Path):
        path = _write(tmp_path / "sv2-installer.yml", """\
            installer:
              sv2_port: 9442
        """)
        assert load_settings(path).sv2_port == 9442

    def test_found_by_walking_up(self, tmp_path: Path, monkeypatch):
        _write(tmp_path / "sv2-installer.yml", "binary_suffix: -tp\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert find_settings_file() == tmp_path / "sv2-installer.yml"
        assert load_settings().binary_suffix == "-tp"

    def test_empty_file(self, tmp_path: Path):
        path = _write(tmp_path / "sv2-installer.yml", "")
        assert load_settings(path) == InstallerSettings()

    def test_env_overrides_install_dir(self, tmp_path: Path, monkeypatch):
        path = _write(tmp_path / "sv2-installer.yml", "install_dir: /opt/a\n")
        monkeypatch.setenv(INSTALL_DIR_ENV, "/opt/b")
        assert load_settings(path).install_dir == Path("/opt/b")


class TestInvalidConfig:
    def test_invalid_yaml(self, tmp_path: Path):
        path = _write(tmp_path / "sv2-installer.yml", "install_dir: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = _write(tmp_path / "sv2-installer.yml", "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    @pytest.mark.parametrize("content", [
        "node_repo: no-slash\n",
        "fallback_versions: ['0.1']\n",
        "default_version: latest\n",
        "connect_timeout: 0\n",
    ])
    def test_schema_violations(self, tmp_path: Path, content):
        path = _write(tmp_path / "sv2-installer.yml", content)
        with pytest.raises(ConfigError, match="Invalid installer configuration"):
            load_settings(path)

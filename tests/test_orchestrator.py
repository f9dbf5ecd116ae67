"""
Tests for the top-level install/update flows with preset decisions.
"""

import json
from pathlib import Path

import pytest

from sv2_installer.core.models.artifact import ErrorKind
from sv2_installer.core.models.platform import Abi, Arch, OsKind, PlatformTriple
from sv2_installer.core.models.release import ReleaseSelection, ReleaseTag, SelectionSource, Variant
from sv2_installer.core.services.release.detection import installed_version
from sv2_installer.core.services.release.domain.artifact import resolve_artifact
from sv2_installer.core.services.release.domain.errors import (
    FeedError,
    InstallIOError,
    NoArtifactError,
    PlatformError,
    ProxyInstallError,
)
from sv2_installer.core.services.release.execution import proxy, service_unit
from sv2_installer.core.services.release.execution.proxy import ProxyMethod
from sv2_installer.core.services.release.orchestration.orchestrator import (
    PresetDecisions,
    install_node,
    install_proxy,
    pick_variant,
    setup_node,
    update_node,
    validate_token,
)

TAGS_URL = "https://api.github.com/repos/Sjors/bitcoin/tags"
PROXY_LATEST = "https://api.github.com/repos/demand-open-source/demand-cli/releases/latest"
ROOT = "bitcoin-sv2-tp-0.1.17"
FILES = {
    f"{ROOT}/bin/bitcoind": (b"daemon", 0o755),
    f"{ROOT}/bin/bitcoin-cli": (b"cli", 0o755),
}


class RecordingDecisions(PresetDecisions):
    """Preset answers that also record which questions were asked."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.asked: list[str] = []

    def choose_variant(self, selection):
        self.asked.append("variant")
        return super().choose_variant(selection)

    def confirm(self, question, default=False):
        self.asked.append(question)
        return super().confirm(question, default)


def _serve_tags(net, *names):
    net.add(TAGS_URL, json.dumps([{"name": n} for n in names]))


def _serve_artifact(net, make_tarball, platform, variant):
    descriptor = resolve_artifact(ReleaseTag(variant=variant, version=(0, 1, 17)), platform)
    net.add(descriptor.url, make_tarball(FILES))
    return descriptor


@pytest.fixture
def no_services(monkeypatch):
    seen: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        seen.append(cmd)
        return {"ok": True, "stdout": ""}

    monkeypatch.setattr(service_unit, "run_command", fake_run)
    monkeypatch.setattr(service_unit, "_detect_init_system", lambda: "systemd")
    return seen


class TestValidateToken:
    def test_strips(self):
        assert validate_token("  abc123 \n") == "abc123"

    @pytest.mark.parametrize("raw", ["", "   ", "two words", "a\"b", "$HOME", "a`id`", "a\\b", "it's"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            validate_token(raw)


class TestPickVariant:
    BOTH = ReleaseSelection(version=(0, 1, 17), variants=frozenset({Variant.STANDARD, Variant.IPC}))
    IPC_ONLY = ReleaseSelection(version=(0, 1, 17), variants=frozenset({Variant.IPC}))

    def test_asks_only_when_both_exist(self):
        decisions = RecordingDecisions(variant=Variant.IPC)
        assert pick_variant(self.BOTH, decisions) is Variant.IPC
        assert decisions.asked == ["variant"]

    def test_single_variant_not_asked(self):
        decisions = RecordingDecisions(variant=Variant.STANDARD)
        assert pick_variant(self.IPC_ONLY, decisions) is Variant.IPC
        assert decisions.asked == []

    def test_requested_must_exist(self):
        with pytest.raises(NoArtifactError, match="standard"):
            pick_variant(self.IPC_ONLY, PresetDecisions(), Variant.STANDARD)

    def test_requested_skips_question(self):
        decisions = RecordingDecisions()
        assert pick_variant(self.BOTH, decisions, Variant.IPC) is Variant.IPC
        assert decisions.asked == []


class TestInstallNode:
    def test_binaries_only(self, net, make_tarball, linux_ctx, settings, work_root):
        _serve_tags(net, "sv2-tp-0.1.16", "sv2-tp-0.1.17", "sv2-tp-ipc-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.IPC)

        out = install_node(
            linux_ctx, settings, PresetDecisions(variant=Variant.IPC),
            setup=False, work_root=work_root,
        )

        assert out["ok"]
        assert out["variant"] is Variant.IPC
        assert out["selection"].source is SelectionSource.FEED
        assert out["setup"] is None
        assert sorted(p.name for p in settings.install_dir.iterdir()) == [
            "bitcoin-cli-sv2tp", "bitcoind-sv2tp",
        ]

    def test_full_setup(self, net, make_tarball, linux_ctx, settings, home, tmp_path, no_services):
        _serve_tags(net, "sv2-tp-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.STANDARD)
        (home / ".bashrc").touch()
        unit_dir = tmp_path / "systemd"

        out = install_node(
            linux_ctx, settings, PresetDecisions(token="tok", answer=True), unit_dir=unit_dir,
        )

        setup = out["setup"]
        assert setup["data_dir"] == home / ".bitcoin-sv2tp"
        assert setup["config"].is_file()
        assert setup["service"] == unit_dir / "bitcoind-sv2tp.service"
        assert setup["registered"] is True
        assert setup["shell_files"] == [home / ".bashrc"]
        assert 'TOKEN="tok"' in setup["env_file"].read_text()
        assert setup["started"] == {"ok": True, "stdout": ""}
        assert no_services[-1] == ["systemctl", "start", "bitcoind-sv2tp.service"]

    def test_no_start_when_declined(self, net, make_tarball, linux_ctx, settings, tmp_path, no_services):
        _serve_tags(net, "sv2-tp-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.STANDARD)
        out = install_node(
            linux_ctx, settings, PresetDecisions(token="tok"), unit_dir=tmp_path / "systemd",
        )
        assert out["setup"]["started"] is None
        assert ["systemctl", "start", "bitcoind-sv2tp.service"] not in no_services

    def test_failed_install_skips_setup(self, net, linux_ctx, settings, home, work_root):
        _serve_tags(net, "sv2-tp-0.1.17")
        out = install_node(linux_ctx, settings, PresetDecisions(token="tok"), work_root=work_root)
        assert not out["ok"]
        assert out["result"].error is ErrorKind.DOWNLOAD
        assert out["setup"] is None
        assert not (home / ".bitcoin-sv2tp").exists()

    def test_empty_token_rejected(self, net, make_tarball, linux_ctx, settings, tmp_path, no_services):
        _serve_tags(net, "sv2-tp-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.STANDARD)
        with pytest.raises(ValueError, match="empty"):
            install_node(linux_ctx, settings, PresetDecisions(), unit_dir=tmp_path / "systemd")


class TestSetupNode:
    def test_bad_token_writes_nothing(self, linux_ctx, settings, home, tmp_path, no_services):
        unit_dir = tmp_path / "systemd"
        with pytest.raises(ValueError, match="spaces"):
            setup_node(linux_ctx, settings, PresetDecisions(token="a b"), unit_dir=unit_dir)
        assert not (home / ".bitcoin-sv2tp").exists()
        assert not unit_dir.exists()
        assert no_services == []

    def test_environment_write_failure_names_path(self, linux_ctx, settings, home, tmp_path, no_services):
        (home / ".sv2_environment").mkdir()
        with pytest.raises(InstallIOError) as exc_info:
            setup_node(
                linux_ctx, settings, PresetDecisions(token="tok"), unit_dir=tmp_path / "systemd",
            )
        assert exc_info.value.stage == "install"
        assert exc_info.value.location == str(home / ".sv2_environment")

    def test_rc_file_failure_names_path(self, linux_ctx, settings, home, tmp_path, no_services, monkeypatch):
        rc = home / ".bashrc"
        rc.touch()
        monkeypatch.setattr(
            "sv2_installer.core.services.release.execution.environment_file.open",
            _denied_open,
            raising=False,
        )
        with pytest.raises(InstallIOError) as exc_info:
            setup_node(
                linux_ctx, settings, PresetDecisions(token="tok"), unit_dir=tmp_path / "systemd",
            )
        assert exc_info.value.location == str(rc)


def _denied_open(path, *args, **kwargs):
    raise PermissionError(13, "Permission denied", str(path))


class TestUpdateNode:
    @pytest.fixture
    def installed(self, settings, monkeypatch):
        """Pretend ``version`` of the daemon is installed."""

        def _install(version: str):
            settings.install_dir.mkdir(parents=True, exist_ok=True)
            (settings.install_dir / "bitcoind-sv2tp").write_text("")
            monkeypatch.setattr(
                installed_version, "run_command",
                lambda cmd, **kw: {"ok": True, "stdout": f"Bitcoin Core version v{version}\n"},
            )

        return _install

    def test_up_to_date(self, net, linux_ctx, settings, installed):
        installed("0.1.17")
        _serve_tags(net, "sv2-tp-0.1.17")
        out = update_node(linux_ctx, settings, PresetDecisions())
        assert out["up_to_date"]
        assert out["result"] is None
        assert out["installed"] == out["latest"] == "0.1.17"

    def test_check_only(self, net, linux_ctx, settings, installed):
        installed("0.1.16")
        _serve_tags(net, "sv2-tp-0.1.17")
        out = update_node(linux_ctx, settings, PresetDecisions(), check_only=True)
        assert not out["up_to_date"]
        assert out["result"] is None
        assert not any("releases/download" in url for _, url in net.calls)

    def test_updates(self, net, make_tarball, linux_ctx, settings, installed, work_root):
        installed("0.1.16")
        _serve_tags(net, "sv2-tp-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.STANDARD)
        out = update_node(linux_ctx, settings, PresetDecisions(), work_root=work_root)
        assert out["ok"]
        assert out["result"].success
        assert (settings.install_dir / "bitcoind-sv2tp").read_bytes() == b"daemon"

    def test_not_installed(self, net, make_tarball, linux_ctx, settings, work_root):
        _serve_tags(net, "sv2-tp-0.1.17")
        _serve_artifact(net, make_tarball, linux_ctx.platform, Variant.STANDARD)
        out = update_node(linux_ctx, settings, PresetDecisions(), work_root=work_root)
        assert out["installed"] is None
        assert out["result"].success


class TestInstallProxy:
    ASSET = "https://github.com/demand-open-source/demand-cli/releases/download/v0.2.0/demand-cli-linux-x86_64"

    def _serve_release(self, net):
        net.add(PROXY_LATEST, json.dumps({
            "tag_name": "v0.2.0",
            "assets": [{"name": "demand-cli-linux-x86_64", "browser_download_url": self.ASSET}],
        }))
        net.add(self.ASSET, b"proxy-binary")

    def test_prebuilt(self, net, linux_ctx, settings, home, monkeypatch, work_root):
        monkeypatch.setenv("PATH", "/usr/bin")
        (home / ".bashrc").touch()
        self._serve_release(net)

        out = install_proxy(
            linux_ctx, settings, PresetDecisions(token="tok", answer=True), work_root=work_root,
        )

        assert out["method"] is ProxyMethod.PREBUILT
        assert out["version"] == "v0.2.0"
        assert out["path"] == home / ".local" / "bin" / "demand-cli"
        assert out["path"].read_bytes() == b"proxy-binary"
        assert out["path_files"] == [home / ".bashrc"]
        assert out["token_files"] == [home / ".bashrc"]
        rc = (home / ".bashrc").read_text()
        assert 'export PATH="$HOME/.local/bin:$PATH"' in rc
        assert 'export TOKEN="tok"' in rc

    def test_token_not_persisted_when_declined(self, net, linux_ctx, settings, home, work_root):
        self._serve_release(net)
        out = install_proxy(linux_ctx, settings, PresetDecisions(token="tok"), work_root=work_root)
        assert out["token_files"] == []

    def test_configured_install_dir(self, net, linux_ctx, settings, tmp_path, work_root):
        self._serve_release(net)
        custom = settings.model_copy(update={"proxy_install_dir": tmp_path / "proxy"})
        out = install_proxy(linux_ctx, custom, PresetDecisions(token="tok"), work_root=work_root)
        assert out["path"] == tmp_path / "proxy" / "demand-cli"

    def test_prebuilt_failure_declined(self, linux_ctx, settings):
        with pytest.raises(FeedError):
            install_proxy(linux_ctx, settings, PresetDecisions(token="tok"))

    def test_prebuilt_failure_falls_back_to_source(self, linux_ctx, settings, home, monkeypatch):
        built: list[Path] = []

        def fake_build(install_dir, **kwargs):
            built.append(install_dir)
            return install_dir / "demand-cli"

        monkeypatch.setattr(
            "sv2_installer.core.services.release.orchestration.orchestrator.build_from_source",
            fake_build,
        )
        decisions = RecordingDecisions(token="tok", answer=True)
        out = install_proxy(linux_ctx, settings, decisions)
        assert out["method"] is ProxyMethod.SOURCE
        assert built == [home / ".local" / "bin"]
        assert decisions.asked[0] == "Try building from source instead?"

    def test_unsupported_arch_before_network(self, net, linux_ctx, settings):
        arm = PlatformTriple(os=OsKind.LINUX, arch=Arch.ARM, abi=Abi.GNUEABIHF)
        ctx = linux_ctx.model_copy(update={"platform": arm})
        with pytest.raises(PlatformError):
            install_proxy(ctx, settings, PresetDecisions(token="tok"))
        assert net.calls == []

    def test_source_method(self, linux_ctx, settings, monkeypatch, tmp_path):
        monkeypatch.setattr(proxy.shutil, "which", lambda tool: None)
        with pytest.raises(ProxyInstallError, match="git"):
            install_proxy(
                linux_ctx, settings, PresetDecisions(token="tok", proxy_method=ProxyMethod.SOURCE),
            )

"""
Shared test fixtures and configuration.

Every test runs against a fake network: ``urlopen`` in the feed and
download modules is replaced by a ``FakeNet`` that only answers URLs a
test registered. Anything else is a 404.
"""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path
from urllib.error import HTTPError

import pytest

from sv2_installer.core.models.platform import Abi, Arch, HostContext, OsKind, PlatformTriple
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.execution import ownership


class FakeResponse:
    """Minimal stand-in for the object ``urlopen`` returns."""

    def __init__(
        self,
        body: bytes = b"",
        status: int = 200,
        headers: dict | None = None,
        fail_after: int | None = None,
    ) -> None:
        self._buf = io.BytesIO(body)
        self.status = status
        self.headers = headers or {}
        self._fail_after = fail_after

    def read(self, n: int = -1) -> bytes:
        if self._fail_after is not None and self._buf.tell() >= self._fail_after:
            raise ConnectionResetError("connection reset by peer")
        return self._buf.read(n)

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc) -> bool:
        return False


class FakeNet:
    """URL → canned response table, recording every request."""

    def __init__(self) -> None:
        self.routes: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []

    def add(self, url: str, body: bytes | str = b"", **kwargs) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = {"body": body, **kwargs}

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.calls.append((req.get_method(), url))
        route = self.routes.get(url)
        if route is None:
            raise HTTPError(url, 404, "Not Found", {}, None)
        if route.get("error") is not None:
            raise route["error"]
        return FakeResponse(
            route["body"],
            status=route.get("status", 200),
            headers=route.get("headers"),
            fail_after=route.get("fail_after"),
        )


@pytest.fixture(autouse=True)
def _isolate_root_logger():
    """Undo root-logger changes (e.g. from CLI ``setup_logging``) after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def net(monkeypatch) -> FakeNet:
    fake = FakeNet()
    monkeypatch.setattr("sv2_installer.core.services.release.detection.feed.urlopen", fake)
    monkeypatch.setattr("sv2_installer.core.services.release.execution.download.urlopen", fake)
    return fake


def build_tarball(path: Path, files: dict[str, tuple[bytes, int]]) -> Path:
    """Write a ``.tar.gz`` with ``{member_name: (content, mode)}``."""
    with tarfile.open(path, "w:gz") as tar:
        for name, (data, mode) in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def make_tarball(tmp_path: Path):
    """Factory: ``make_tarball(files) -> bytes`` of a gzip tarball."""
    counter = iter(range(1000))

    def _make(files: dict[str, tuple[bytes, int]]) -> bytes:
        path = tmp_path / f"archive-{next(counter)}.tar.gz"
        return build_tarball(path, files).read_bytes()

    return _make


@pytest.fixture
def linux_x86() -> PlatformTriple:
    return PlatformTriple(os=OsKind.LINUX, arch=Arch.X86_64, abi=Abi.GNU)


@pytest.fixture
def settings(tmp_path: Path) -> InstallerSettings:
    return InstallerSettings(install_dir=tmp_path / "bin")


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def linux_ctx(linux_x86: PlatformTriple, settings: InstallerSettings, home: Path) -> HostContext:
    return HostContext(
        platform=linux_x86,
        user="miner",
        home_dir=home,
        install_dir=settings.install_dir,
        distro="ubuntu",
    )


@pytest.fixture
def work_root(tmp_path: Path) -> Path:
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def as_root(monkeypatch) -> list[tuple[Path, str]]:
    """Pretend to run under sudo; record chowns instead of performing them."""
    chowned: list[tuple[Path, str]] = []
    monkeypatch.setattr(ownership, "running_as_root", lambda: True)
    monkeypatch.setattr(
        ownership.shutil, "chown", lambda path, user=None, group=None: chowned.append((Path(path), user)),
    )
    return chowned

"""
Tests for latest-version resolution and its fallback chain.
"""

import json
import logging

from sv2_installer.core.models.release import SelectionSource, Variant
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.resolver.version_resolution import (
    probe_known_versions,
    resolve_latest_version,
)

TAGS_URL = "https://api.github.com/repos/Sjors/bitcoin/tags"
TAG_PAGE = "https://github.com/Sjors/bitcoin/releases/tag/"


class TestProbeKnownVersions:
    def test_standard_checked_before_ipc(self):
        seen = []

        def exists(url):
            seen.append(url)
            return False

        probe_known_versions(["0.1.17"], exists=exists, host="github.com", repo="Sjors/bitcoin")
        assert seen == [TAG_PAGE + "sv2-tp-0.1.17", TAG_PAGE + "sv2-tp-ipc-0.1.17"]

    def test_ipc_hit(self):
        selection = probe_known_versions(
            ["0.1.17"],
            exists=lambda url: url.endswith("sv2-tp-ipc-0.1.17"),
            host="github.com",
            repo="Sjors/bitcoin",
        )
        assert selection.variants == frozenset({Variant.IPC})

    def test_no_hit(self):
        assert probe_known_versions(
            ["0.1.17"], exists=lambda url: False, host="github.com", repo="Sjors/bitcoin",
        ) is None


class TestResolveLatestVersion:
    def test_from_feed(self, net):
        net.add(TAGS_URL, json.dumps([
            {"name": "sv2-tp-0.1.15"},
            {"name": "sv2-tp-0.1.17"},
            {"name": "sv2-tp-ipc-0.1.17"},
            {"name": "garbage-1.0.0"},
        ]))
        selection = resolve_latest_version(InstallerSettings())
        assert selection.version_string == "0.1.17"
        assert selection.has_both_variants
        assert selection.source is SelectionSource.FEED

    def test_unreachable_feed_probes_known_versions(self, net):
        net.add(TAG_PAGE + "sv2-tp-0.1.16")
        settings = InstallerSettings(fallback_versions=["0.1.17", "0.1.16"])
        selection = resolve_latest_version(settings)
        assert selection.version == (0, 1, 16)
        assert selection.variants == frozenset({Variant.STANDARD})
        assert selection.source is SelectionSource.PROBE
        heads = [url for method, url in net.calls if method == "HEAD"]
        assert heads == [
            TAG_PAGE + "sv2-tp-0.1.17",
            TAG_PAGE + "sv2-tp-ipc-0.1.17",
            TAG_PAGE + "sv2-tp-0.1.16",
        ]

    def test_feed_without_valid_tags_probes(self, net):
        net.add(TAGS_URL, json.dumps([{"name": "v1.0.0"}]))
        net.add(TAG_PAGE + "sv2-tp-0.1.15")
        selection = resolve_latest_version(InstallerSettings())
        assert selection.version_string == "0.1.15"
        assert selection.source is SelectionSource.PROBE

    def test_injected_exists(self):
        settings = InstallerSettings(fallback_versions=["0.1.17", "0.1.16"])
        selection = resolve_latest_version(
            settings, exists=lambda url: url.endswith("sv2-tp-0.1.16"),
        )
        assert selection.version_string == "0.1.16"

    def test_everything_fails_uses_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            selection = resolve_latest_version(InstallerSettings(default_version="0.1.17"))
        assert selection.version_string == "0.1.17"
        assert selection.has_both_variants
        assert selection.source is SelectionSource.DEFAULT
        assert "Falling back to default version" in caplog.text

"""
Tests for tag parsing and latest-version selection.
"""

import pytest

from sv2_installer.core.models.release import ReleaseTag, SelectionSource, Variant
from sv2_installer.core.services.release.domain.tags import (
    parse_tag,
    parse_version,
    select_latest,
)


class TestParseTag:
    def test_standard(self):
        tag = parse_tag("sv2-tp-0.1.17")
        assert tag == ReleaseTag(variant=Variant.STANDARD, version=(0, 1, 17))
        assert tag.name == "sv2-tp-0.1.17"

    def test_ipc(self):
        tag = parse_tag("sv2-tp-ipc-0.1.17")
        assert tag.variant is Variant.IPC
        assert tag.version == (0, 1, 17)
        assert str(tag) == "sv2-tp-ipc-0.1.17"

    @pytest.mark.parametrize("raw", [
        "sv2-tp-1.2",
        "v1.2.3",
        "sv2-tp-1.2.3.4",
        "sv2-tp-ipc-1.2",
        "sv2-tp-1.2.x",
        " sv2-tp-1.2.3",
        "sv2-tp-1.2.3\n",
        "xsv2-tp-1.2.3",
        "sv2-tp--1.2.3",
        "",
    ])
    def test_rejects_malformed(self, raw):
        assert parse_tag(raw) is None

    def test_multi_digit_components(self):
        assert parse_tag("sv2-tp-10.20.300").version == (10, 20, 300)


class TestParseVersion:
    def test_plain(self):
        assert parse_version("0.1.17") == (0, 1, 17)

    def test_leading_v(self):
        assert parse_version("v1.2.3") == (1, 2, 3)

    @pytest.mark.parametrize("raw", ["1.2", "1.2.3.4", "a.b.c", ""])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_version(raw)


class TestSelectLatest:
    def test_both_variants_at_top_version(self):
        feed = ["sv2-tp-0.1.15", "sv2-tp-0.1.17", "sv2-tp-ipc-0.1.17", "garbage-1.0.0"]
        selection = select_latest(feed)
        assert selection.version == (0, 1, 17)
        assert selection.variants == frozenset({Variant.STANDARD, Variant.IPC})
        assert selection.has_both_variants
        assert selection.source is SelectionSource.FEED

    def test_numeric_ordering(self):
        selection = select_latest(["sv2-tp-0.1.9", "sv2-tp-0.1.10"])
        assert selection.version_string == "0.1.10"

    def test_minor_beats_large_patch(self):
        selection = select_latest(["sv2-tp-0.1.99", "sv2-tp-0.2.0"])
        assert selection.version == (0, 2, 0)

    def test_only_ipc_at_top(self):
        selection = select_latest(["sv2-tp-0.1.16", "sv2-tp-ipc-0.1.17"])
        assert selection.version == (0, 1, 17)
        assert selection.variants == frozenset({Variant.IPC})
        assert not selection.has_both_variants

    def test_lower_variants_dropped_when_version_rises(self):
        selection = select_latest(["sv2-tp-ipc-0.1.16", "sv2-tp-0.1.17"])
        assert selection.variants == frozenset({Variant.STANDARD})

    def test_malformed_tags_never_win(self):
        selection = select_latest(["sv2-tp-9.9", "v9.9.9", "sv2-tp-9.9.9.9", "sv2-tp-0.1.12"])
        assert selection.version == (0, 1, 12)

    def test_no_valid_tags(self):
        assert select_latest(["v1.0.0", "latest"]) is None

    def test_empty(self):
        assert select_latest([]) is None

    def test_accepts_single_pass_iterator(self):
        selection = select_latest(iter(["sv2-tp-0.1.13", "sv2-tp-0.1.14"]))
        assert selection.version_string == "0.1.14"

    def test_tag_for_variant(self):
        selection = select_latest(["sv2-tp-ipc-0.1.17"])
        assert selection.tag(Variant.IPC).name == "sv2-tp-ipc-0.1.17"
        assert selection.to_dict() == {
            "version": "0.1.17",
            "variants": ["ipc"],
            "source": "feed",
        }

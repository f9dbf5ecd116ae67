"""
Release models — tags, variants, and the selection produced from a tag feed.

A tag is valid only when it matches ``sv2-tp[-ipc]-<major>.<minor>.<patch>``.
Everything here is immutable; the chain is feed → tags → selection.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

Version = tuple[int, int, int]


class Variant(StrEnum):
    """Build flavour of the patched node at a given version."""

    STANDARD = "standard"
    IPC = "ipc"


class SelectionSource(StrEnum):
    """Where a resolved version came from."""

    FEED = "feed"
    PROBE = "probe"
    DEFAULT = "default"


def format_version(version: Version) -> str:
    """Render a version tuple as ``X.Y.Z``."""
    return ".".join(str(part) for part in version)


class ReleaseTag(BaseModel):
    """A validated release tag from the remote feed."""

    model_config = ConfigDict(frozen=True)

    variant: Variant
    version: Version

    @property
    def version_string(self) -> str:
        return format_version(self.version)

    @property
    def name(self) -> str:
        """Tag name as published: ``sv2-tp-X.Y.Z`` or ``sv2-tp-ipc-X.Y.Z``."""
        if self.variant is Variant.IPC:
            return f"sv2-tp-ipc-{self.version_string}"
        return f"sv2-tp-{self.version_string}"

    def __str__(self) -> str:
        return self.name


class ReleaseSelection(BaseModel):
    """The top version found in a feed plus every variant present at it.

    Both variants are kept when they share the top version so the caller
    can ask the operator which one to install.
    """

    model_config = ConfigDict(frozen=True)

    version: Version
    variants: frozenset[Variant] = Field(default_factory=frozenset)
    source: SelectionSource = SelectionSource.FEED

    @property
    def version_string(self) -> str:
        return format_version(self.version)

    def has(self, variant: Variant) -> bool:
        return variant in self.variants

    @property
    def has_both_variants(self) -> bool:
        return self.has(Variant.STANDARD) and self.has(Variant.IPC)

    def tag(self, variant: Variant) -> ReleaseTag:
        """Build the tag for ``variant`` at the selected version."""
        return ReleaseTag(variant=variant, version=self.version)

    def to_dict(self) -> dict:
        return {
            "version": self.version_string,
            "variants": sorted(v.value for v in self.variants),
            "source": self.source.value,
        }

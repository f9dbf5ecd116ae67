"""
L1 Domain — Tag parsing and latest-version selection (pure).

Versions are compared as integer tuples, never as strings, so
``0.1.9 < 0.1.10`` and ``0.2.0 > 0.1.99``. No I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from sv2_installer.core.models.release import (
    ReleaseSelection,
    ReleaseTag,
    SelectionSource,
    Variant,
    Version,
)
from sv2_installer.core.services.release.data.constants import TAG_PATTERN


def parse_tag(raw: str) -> ReleaseTag | None:
    """Parse a raw tag string, or return None if it is not a valid tag.

    ``sv2-tp-0.1.17`` → standard 0.1.17; ``sv2-tp-ipc-0.1.17`` → ipc 0.1.17.
    Anything else (``v1.2.3``, ``sv2-tp-1.2``, ``sv2-tp-1.2.3.4``) → None.
    """
    if not isinstance(raw, str):
        return None
    match = TAG_PATTERN.fullmatch(raw)
    if match is None:
        return None
    ipc, major, minor, patch = match.groups()
    return ReleaseTag(
        variant=Variant.IPC if ipc else Variant.STANDARD,
        version=(int(major), int(minor), int(patch)),
    )


def parse_version(value: str) -> Version:
    """Parse ``X.Y.Z`` into a version tuple.

    Raises:
        ValueError: If ``value`` is not three dot-separated integers.
    """
    parts = value.strip().lstrip("v").split(".")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Not a X.Y.Z version: {value!r}")
    return int(parts[0]), int(parts[1]), int(parts[2])


def select_latest(tags: Iterable[str]) -> ReleaseSelection | None:
    """Pick the highest version among valid tags.

    Non-matching strings are dropped silently. When both variants exist
    at the top version, both are reported in ``variants``.

    Args:
        tags: Raw tag strings (consumed in a single pass).

    Returns:
        The selection, or None when no valid tag was seen.
    """
    best: Version | None = None
    variants: set[Variant] = set()

    for raw in tags:
        tag = parse_tag(raw)
        if tag is None:
            continue
        if best is None or tag.version > best:
            best = tag.version
            variants = {tag.variant}
        elif tag.version == best:
            variants.add(tag.variant)

    if best is None:
        return None
    return ReleaseSelection(
        version=best,
        variants=frozenset(variants),
        source=SelectionSource.FEED,
    )

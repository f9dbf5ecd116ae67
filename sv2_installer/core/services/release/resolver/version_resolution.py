"""
L2 Resolver — Latest-version resolution with the fallback chain.

    tag feed (JSON → text scan)
      → probe known historical versions (HEAD on release-tag pages)
        → hard-coded default version (warning, continue)

The first two steps are recovered locally; the last is a soft failure:
the run continues with the default instead of aborting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sv2_installer.core.models.release import ReleaseSelection, SelectionSource, Variant
from sv2_installer.core.models.settings import InstallerSettings
from sv2_installer.core.services.release.detection.feed import fetch_tags, url_exists
from sv2_installer.core.services.release.domain.artifact import release_tag_url
from sv2_installer.core.services.release.domain.errors import FeedError
from sv2_installer.core.services.release.domain.tags import parse_version, select_latest

logger = logging.getLogger(__name__)

ExistsFn = Callable[[str], bool]


def probe_known_versions(
    versions: Sequence[str],
    *,
    exists: ExistsFn,
    host: str,
    repo: str,
) -> ReleaseSelection | None:
    """Probe ``versions`` in order for an existing release tag.

    For each version the standard tag is checked first, then the IPC
    tag. The first hit wins.

    Args:
        versions: Descending ``X.Y.Z`` strings.
        exists: Existence check, called with a release-tag URL.
        host: Hosting service hostname.
        repo: ``owner/name``.

    Returns:
        A selection with the variant whose tag exists, or None.
    """
    for raw in versions:
        version = parse_version(raw)
        for variant in (Variant.STANDARD, Variant.IPC):
            tag = ReleaseSelection(version=version).tag(variant)
            url = release_tag_url(tag.name, host=host, repo=repo)
            if exists(url):
                logger.info(
                    "Found existing version via fallback (%s tag check): %s",
                    variant.value, tag.version_string,
                )
                return ReleaseSelection(
                    version=version,
                    variants=frozenset({variant}),
                    source=SelectionSource.PROBE,
                )
    return None


def resolve_latest_version(
    settings: InstallerSettings,
    *,
    exists: ExistsFn | None = None,
) -> ReleaseSelection:
    """Resolve the newest published release of the patched node.

    Never raises for feed problems; the worst case is the configured
    default version, flagged with ``source=default``.
    """
    try:
        tags = fetch_tags(
            settings.node_repo,
            api_host=settings.api_host,
            timeout=settings.feed_timeout,
        )
        selection = select_latest(tags)
    except FeedError as exc:
        logger.info("Could not fetch tag feed (%s at %s)", exc, exc.location)
        selection = None

    if selection is not None:
        logger.info(
            "Latest version from feed: %s (%s)",
            selection.version_string,
            ", ".join(sorted(v.value for v in selection.variants)),
        )
        return selection

    logger.info("No version from the tag feed, checking known versions...")
    check = exists or (lambda url: url_exists(url, timeout=settings.feed_timeout))
    selection = probe_known_versions(
        settings.fallback_versions,
        exists=check,
        host=settings.host,
        repo=settings.node_repo,
    )
    if selection is not None:
        return selection

    logger.warning("Falling back to default version: %s", settings.default_version)
    return ReleaseSelection(
        version=parse_version(settings.default_version),
        variants=frozenset({Variant.STANDARD, Variant.IPC}),
        source=SelectionSource.DEFAULT,
    )

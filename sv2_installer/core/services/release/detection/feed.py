"""
L3 Detection — Tag feed client and release existence probes.

Read-only network calls against the source-hosting service:

    GET  https://<api_host>/repos/<owner>/<repo>/tags
    HEAD https://<host>/<owner>/<repo>/releases/tag/<tag>
    GET  https://<api_host>/repos/<owner>/<repo>/releases/latest

Every request has an explicit timeout. Transport errors, non-2xx
responses and empty bodies surface as ``FeedError``; callers decide
whether that is recoverable.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from sv2_installer.core.services.release.data.constants import (
    API_ACCEPT,
    DEFAULT_API_HOST,
    NODE_REPO,
    TAG_NAME_SCAN,
    USER_AGENT,
)
from sv2_installer.core.services.release.domain.artifact import (
    latest_release_api_url,
    tags_api_url,
)
from sv2_installer.core.services.release.domain.errors import FeedError

logger = logging.getLogger(__name__)


def _request(url: str, *, method: str = "GET", json_api: bool = False) -> Request:
    headers = {"User-Agent": USER_AGENT}
    if json_api:
        headers["Accept"] = API_ACCEPT
    return Request(url, method=method, headers=headers)


def _get_body(url: str, *, timeout: float) -> str:
    """GET ``url`` and return its decoded body.

    Raises:
        FeedError: On transport errors, non-2xx status, or an empty body.
    """
    logger.debug("GET %s (timeout=%ss)", url, timeout)
    try:
        with urlopen(_request(url, json_api=True), timeout=timeout) as resp:  # nosec - HTTPS
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise FeedError(f"Unexpected HTTP status {status}", location=url)
            raw = resp.read()
    except HTTPError as exc:
        raise FeedError(f"HTTP {exc.code} from feed", location=url) from exc
    except (URLError, TimeoutError, OSError) as exc:
        raise FeedError(f"Feed unreachable: {exc}", location=url) from exc

    body = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
    if not body.strip():
        raise FeedError("Empty response from feed", location=url)
    return body


def fetch_tags(
    repo: str = NODE_REPO,
    *,
    api_host: str = DEFAULT_API_HOST,
    timeout: float = 30.0,
) -> Iterator[str]:
    """Fetch raw tag names from the hosting API.

    The request happens eagerly; the returned iterator yields names
    lazily from the already-fetched body (one pass, not restartable).

    Raises:
        FeedError: If the feed cannot be fetched or is not a tag list.
    """
    url = tags_api_url(api_host=api_host, repo=repo)
    body = _get_body(url, timeout=timeout)

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        logger.debug("Tag feed is not valid JSON, scanning raw text for tag names")
        return _scan_tag_names(body)

    if not isinstance(payload, list):
        raise FeedError("Tag feed is not a JSON array", location=url)
    return _iter_tag_names(payload)


def _iter_tag_names(payload: list) -> Iterator[str]:
    for entry in payload:
        if isinstance(entry, dict):
            name = entry.get("name")
            if isinstance(name, str):
                yield name


def _scan_tag_names(body: str) -> Iterator[str]:
    for match in TAG_NAME_SCAN.finditer(body):
        yield match.group(1)


def url_exists(url: str, *, timeout: float = 30.0) -> bool:
    """HEAD ``url``; True for a 2xx answer, False for anything else."""
    logger.debug("HEAD %s", url)
    try:
        with urlopen(_request(url, method="HEAD"), timeout=timeout) as resp:  # nosec - HTTPS
            status = getattr(resp, "status", 200)
            return 200 <= status < 300
    except (HTTPError, URLError, TimeoutError, OSError) as exc:
        logger.debug("Probe failed for %s: %s", url, exc)
        return False


def fetch_latest_release(
    repo: str,
    *,
    api_host: str = DEFAULT_API_HOST,
    timeout: float = 30.0,
) -> dict:
    """Fetch ``releases/latest`` metadata as a dict.

    Raises:
        FeedError: If the endpoint is unreachable or returns non-object JSON.
    """
    url = latest_release_api_url(repo, api_host=api_host)
    body = _get_body(url, timeout=timeout)
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise FeedError(f"Release metadata is not valid JSON: {exc}", location=url) from exc
    if not isinstance(data, dict):
        raise FeedError("Release metadata is not a JSON object", location=url)
    return data

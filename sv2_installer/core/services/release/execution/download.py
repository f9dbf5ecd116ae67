"""
L4 Execution — Download and checksum verification.

Streams a URL to a local file with a connect/read timeout and an
overall deadline. Anything short of a complete 2xx body is a
``DownloadError``; a partial file is removed before raising.
"""

from __future__ import annotations

import hashlib
import http.client
import logging
import time
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from sv2_installer.core.services.release.data.constants import DOWNLOAD_CHUNK, USER_AGENT
from sv2_installer.core.services.release.domain.errors import DownloadError

logger = logging.getLogger(__name__)


def download_file(
    url: str,
    dest: Path,
    *,
    connect_timeout: float = 30.0,
    total_timeout: float = 120.0,
) -> Path:
    """Download ``url`` into ``dest``.

    Args:
        url: HTTPS URL to fetch.
        dest: Target file path (its directory must exist).
        connect_timeout: Socket timeout for connect and each read.
        total_timeout: Deadline for the whole transfer.

    Returns:
        ``dest``.

    Raises:
        DownloadError: On transport errors, non-2xx status, timeout,
            a truncated body, or an empty file.
    """
    logger.info("Attempting to download from: %s", url)
    deadline = time.monotonic() + total_timeout
    received = 0
    expected: int | None = None

    try:
        req = Request(url, headers={"User-Agent": USER_AGENT})
        with urlopen(req, timeout=connect_timeout) as resp, open(dest, "wb") as out:  # nosec - HTTPS
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise DownloadError(f"Unexpected HTTP status {status}", location=url)
            length = resp.headers.get("Content-Length") if getattr(resp, "headers", None) else None
            if length and str(length).isdigit():
                expected = int(length)

            for chunk in iter(lambda: resp.read(DOWNLOAD_CHUNK), b""):
                out.write(chunk)
                received += len(chunk)
                if time.monotonic() > deadline:
                    raise DownloadError(
                        f"Download exceeded {total_timeout:.0f}s deadline", location=url,
                    )
    except DownloadError:
        dest.unlink(missing_ok=True)
        raise
    except HTTPError as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"HTTP {exc.code} downloading artifact", location=url) from exc
    except (URLError, TimeoutError, OSError, http.client.HTTPException) as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Download failed: {exc}", location=url) from exc

    if expected is not None and received < expected:
        dest.unlink(missing_ok=True)
        raise DownloadError(
            f"Download truncated: got {received} of {expected} bytes", location=url,
        )
    if received == 0:
        dest.unlink(missing_ok=True)
        raise DownloadError("Downloaded an empty file", location=url)

    logger.info("Successfully downloaded %s (%d bytes)", dest.name, received)
    return dest


def verify_checksum(path: Path, expected: str) -> bool:
    """Verify file checksum.  Format: ``algo:hex`` (e.g. ``sha256:abc...``).

    Supports any algorithm ``hashlib.new`` knows (sha256, sha1, md5, ...).
    """
    algo, _, expected_hash = expected.partition(":")
    if not expected_hash:
        algo, expected_hash = "sha256", expected
    h = hashlib.new(algo.strip().lower())
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest() == expected_hash.strip().lower()

"""
L4 Execution — Hand files written under sudo back to the invoking user.

Everything the installer writes into the user's home (data dir,
``bitcoin.conf``, ``~/.sv2_environment``, the LaunchAgent plist) must
stay readable by that user's shell and service manager.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def running_as_root() -> bool:
    return os.name == "posix" and os.geteuid() == 0


def chown_to_user(path: Path, user: str) -> bool:
    """Give ``path`` to ``user`` when running as root.

    A failed chown is logged, not raised: the file itself was written.

    Returns:
        True if ownership was changed.
    """
    if not running_as_root() or not user or user == "root":
        return False
    try:
        shutil.chown(path, user=user)
    except (LookupError, OSError) as exc:
        logger.warning("Cannot chown %s to %s: %s", path, user, exc)
        return False
    return True

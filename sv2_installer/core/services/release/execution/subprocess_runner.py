"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for install
operations (service registration, source builds, version probes).
Logging and error handling are centralised here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    *,
    timeout: int = 120,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
) -> dict[str, Any]:
    """Run a command and capture its output.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before ``TimeoutExpired``.
        env_overrides: Extra env vars (values may reference ``$VARS``).
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    env = os.environ.copy()
    if env_overrides:
        for key, value in env_overrides.items():
            env[key] = os.path.expandvars(value)

    logger.debug("Running: %s", " ".join(cmd))
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except FileNotFoundError:
        return {"ok": False, "error": f"Command not found: {cmd[0]}"}
    except OSError as e:
        logger.exception("Subprocess error: %s", cmd)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-2000:] if result.stdout else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    stderr = result.stderr[-2000:] if result.stderr else ""
    logger.debug("Command failed (exit %d): %s", result.returncode, stderr.strip())
    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "stderr": stderr,
        "stdout": stdout,
        "elapsed_ms": elapsed_ms,
    }

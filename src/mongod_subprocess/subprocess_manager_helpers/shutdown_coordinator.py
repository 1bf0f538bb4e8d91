"""Terminate mongod gracefully, escalating to SIGKILL after a grace period."""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


async def terminate_process(
    process: asyncio.subprocess.Process,
    *,
    grace_seconds: float,
    force_timeout_seconds: float,
) -> Optional[int]:
    """
    Stop *process*, sending SIGTERM first and SIGKILL if it lingers.

    Never raises: shutdown must succeed even when the process is
    unresponsive, so failures are logged instead.

    Args:
        process: Running asyncio subprocess
        grace_seconds: Time allowed for a graceful exit after SIGTERM
        force_timeout_seconds: Time allowed for the exit after SIGKILL

    Returns:
        The exit code, or None if the process survived SIGKILL
    """
    if process.returncode is not None:
        return process.returncode

    pid = process.pid
    logger.info("Stopping MongoDB subprocess (PID %s)", pid)
    try:
        process.terminate()
    except ProcessLookupError:  # policy_guard: allow-silent-handler
        logger.debug("MongoDB process %s already gone before SIGTERM", pid)

    returncode = await _wait_for_exit(process, grace_seconds)
    if returncode is not None:
        logger.info("MongoDB subprocess %s exited gracefully (code %s)", pid, returncode)
        return returncode

    logger.warning("MongoDB process %s did not exit within %.1fs; sending SIGKILL", pid, grace_seconds)
    try:
        process.kill()
    except ProcessLookupError:  # policy_guard: allow-silent-handler
        logger.debug("MongoDB process %s exited before SIGKILL", pid)

    returncode = await _wait_for_exit(process, force_timeout_seconds)
    if returncode is None:
        logger.error("MongoDB process %s still alive %.1fs after SIGKILL", pid, force_timeout_seconds)
    else:
        logger.info("MongoDB subprocess %s force killed", pid)
    return returncode


async def _wait_for_exit(process: asyncio.subprocess.Process, timeout: float) -> Optional[int]:
    try:
        return await asyncio.wait_for(process.wait(), timeout=timeout)
    except asyncio.TimeoutError:  # policy_guard: allow-silent-handler
        return None

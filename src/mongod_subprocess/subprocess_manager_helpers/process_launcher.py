"""Spawn the mongod binary with arguments derived from configuration."""

import asyncio
import logging
from typing import List

from ..errors import SpawnError
from ..subprocess_config import LOOPBACK_HOST, SubprocessConfig

logger = logging.getLogger(__name__)


def build_command_args(config: SubprocessConfig) -> List[str]:
    """Return mongod flags; the bind address is always loopback."""
    args = [
        "--dbpath",
        str(config.db_path),
        "--port",
        str(config.port),
        "--logpath",
        str(config.log_path),
        "--bind_ip",
        LOOPBACK_HOST,
    ]
    if config.wired_tiger_cache_size_gb is not None:
        args.extend(["--wiredTigerCacheSizeGB", f"{config.wired_tiger_cache_size_gb:g}"])
    return args


def prepare_filesystem(config: SubprocessConfig) -> None:
    """Create the data directory and the log file's parent directory."""
    try:
        config.db_path.mkdir(parents=True, exist_ok=True)
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SpawnError(f"Failed to prepare MongoDB directories: {exc}") from exc


async def launch_mongod(config: SubprocessConfig) -> asyncio.subprocess.Process:
    """
    Spawn mongod with stdout and stderr captured.

    Output is piped rather than inherited so it stays out of the host logs
    and can be scanned for the readiness marker.

    Args:
        config: Resolved subprocess configuration

    Returns:
        The running asyncio subprocess

    Raises:
        SpawnError: If the directories cannot be created or the OS refuses to start the binary
    """
    prepare_filesystem(config)
    args = build_command_args(config)
    logger.info("Launching %s %s", config.mongod_path, " ".join(args))
    try:
        process = await asyncio.create_subprocess_exec(
            config.mongod_path,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as exc:
        raise SpawnError(f"Failed to start MongoDB subprocess: {exc}", binary=config.mongod_path) from exc

    logger.info("MongoDB subprocess spawned (PID %s)", process.pid)
    return process

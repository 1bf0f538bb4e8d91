"""Check that the mongod port is free before launching.

The probe binds a transient listener and closes it straight away, so another
process can still take the port before mongod binds it. The result is a
diagnostic only; a real conflict still surfaces when mongod exits early.
"""

import asyncio
import errno
import logging
from typing import Optional

import psutil

from ..errors import PortConflictError, PreflightError
from ..subprocess_config import LOOPBACK_HOST

logger = logging.getLogger(__name__)


async def check_port_available(port: int, host: str = LOOPBACK_HOST) -> None:
    """
    Verify that ``host:port`` can be bound.

    Args:
        port: TCP port mongod will listen on
        host: Interface to probe

    Raises:
        PortConflictError: If the address is already in use
        PreflightError: If binding fails for any other reason
    """
    loop = asyncio.get_running_loop()
    try:
        server = await loop.create_server(asyncio.Protocol, host=host, port=port)
    except OSError as exc:
        if exc.errno == errno.EADDRINUSE:
            holder = await describe_port_holder(port)
            raise PortConflictError(port=port, holder=holder) from exc
        raise PreflightError(f"Port check failed: {exc}", port=port) from exc

    server.close()
    await server.wait_closed()
    logger.debug("Port %s on %s is free", port, host)


async def describe_port_holder(port: int) -> Optional[str]:
    """Return ``"<name> (PID <pid>)"`` for the process listening on *port*, if visible."""
    return await asyncio.to_thread(_find_port_holder, port)


def _find_port_holder(port: int) -> Optional[str]:
    try:
        connections = psutil.net_connections(kind="inet")
    except (psutil.AccessDenied, OSError) as exc:  # policy_guard: allow-silent-handler
        logger.debug("Cannot inspect sockets for port %s: %s", port, exc)
        return None

    for conn in connections:
        laddr = conn.laddr
        if not laddr or laddr.port != port or conn.status != psutil.CONN_LISTEN:
            continue
        if conn.pid is None:
            return None
        return f"{_process_name(conn.pid)} (PID {conn.pid})"
    return None


def _process_name(pid: int) -> str:
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):  # policy_guard: allow-silent-handler
        return "unknown process"

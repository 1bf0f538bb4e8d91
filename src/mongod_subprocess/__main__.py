"""Run mongod in the foreground until SIGINT or SIGTERM.

Settings come from the ``MONGO_*`` environment variables; see
``subprocess_config.config_from_env``. The subprocess is enabled unless
``MONGO_SUBPROCESS_ENABLED`` says otherwise.
"""

import asyncio
import logging
import signal
import sys

from .config import ConfigurationError, env_bool
from .errors import StartupError
from .logging_config import setup_logging
from .subprocess_config import config_from_env
from .subprocess_manager import MongoSubprocessManager

logger = logging.getLogger("mongod_subprocess")


async def _serve(manager: MongoSubprocessManager) -> None:
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop_requested.set)

    async with manager:
        print(manager.get_connection_uri(), flush=True)
        await stop_requested.wait()
        logger.info("Shutdown signal received")


def main() -> int:
    setup_logging("mongod_subprocess")
    try:
        config = config_from_env(enabled=env_bool("MONGO_SUBPROCESS_ENABLED", or_value=True))
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if not config.enabled:
        logger.info("MongoDB subprocess disabled via MONGO_SUBPROCESS_ENABLED")
        return 0

    try:
        asyncio.run(_serve(MongoSubprocessManager(config)))
    except StartupError as exc:
        logger.error("MongoDB subprocess failed to start: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

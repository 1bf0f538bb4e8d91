"""One-shot result cell for a single startup attempt.

Readiness, process exit, the startup timer, and ``stop()`` all report into
the same cell. Only the first report counts; later ones return False.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..errors import StartupError

logger = logging.getLogger(__name__)


class StartupOutcome:
    """First-settler-wins completion for one startup attempt."""

    def __init__(self) -> None:
        self._future: asyncio.Future[Optional[StartupError]] = asyncio.get_running_loop().create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    @property
    def error(self) -> Optional[StartupError]:
        if not self._future.done():
            return None
        return self._future.result()

    def succeed(self) -> bool:
        """Record readiness. Returns False if the attempt already settled."""
        if self._future.done():
            return False
        self._future.set_result(None)
        return True

    def fail(self, error: StartupError) -> bool:
        """Record a failure. Returns False if the attempt already settled."""
        if self._future.done():
            logger.debug("Ignoring late startup signal: %s", error)
            return False
        self._future.set_result(error)
        return True

    async def wait(self) -> None:
        """Wait for the first signal; raise it if it was a failure."""
        error = await asyncio.shield(self._future)
        if error is not None:
            raise error

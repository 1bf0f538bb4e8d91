"""Handle bundling a spawned mongod with the tasks that watch it."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Optional

from .readiness_detector import ReadinessDetector

logger = logging.getLogger(__name__)

_OUTPUT_DRAIN_TIMEOUT_SECONDS = 1.0


@dataclass(eq=False)
class ProcessHandle:
    """A live mongod process, its output detector, and its exit watcher."""

    process: asyncio.subprocess.Process
    detector: ReadinessDetector
    exit_task: Optional[asyncio.Task] = field(default=None)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    async def release(self) -> None:
        """Wait for the exit watcher, let remaining output drain, then stop reading."""
        if self.exit_task is not None and self.exit_task is not asyncio.current_task():
            await asyncio.gather(self.exit_task, return_exceptions=True)
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self.detector.wait_finished(), timeout=_OUTPUT_DRAIN_TIMEOUT_SECONDS)
        await self.detector.aclose()
        logger.debug("Released MongoDB process handle (PID %s)", self.pid)

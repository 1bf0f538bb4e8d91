"""
Lifecycle controller for a local mongod subprocess.

Usage:
    from mongod_subprocess import MongoSubprocessManager

    manager = MongoSubprocessManager({"enabled": True, "port": 27018})
    await manager.start()
    uri = manager.get_connection_uri()
    ...
    await manager.stop()

``start()`` is idempotent: concurrent callers share one startup attempt,
and that attempt settles exactly once on whichever signal arrives first
(readiness marker, process exit, startup timeout, or ``stop()``). Every
failed attempt terminates whatever it spawned before the error reaches the
callers. ``stop()`` never raises and works from any state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from .errors import PrematureExitError, StartupAbortedError, StartupError, StartupTimeoutError
from .lifecycle_state import LifecycleState
from .subprocess_config import SubprocessConfig, resolve_config
from .subprocess_manager_helpers import (
    ControllerState,
    PendingStartup,
    ProcessHandle,
    ReadinessDetector,
    ReadinessPredicate,
    StartupOutcome,
    attach_process,
    begin_startup,
    begin_stopping,
    check_port_available,
    launch_mongod,
    mark_running,
    mark_stopped,
    process_exited,
    terminate_process,
)

logger = logging.getLogger(__name__)


class MongoSubprocessManager:
    """Start, watch, and stop one mongod process for the life of the host application."""

    def __init__(
        self,
        config: Union[SubprocessConfig, Mapping[str, Any], None] = None,
        *,
        readiness_predicate: Optional[ReadinessPredicate] = None,
    ):
        if isinstance(config, SubprocessConfig):
            self.config = config
        else:
            self.config = resolve_config(config)
        self._readiness_predicate = readiness_predicate
        self._state = ControllerState()
        self._shutdown_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> LifecycleState:
        return self._state.phase

    @property
    def pid(self) -> Optional[int]:
        handle = self._state.handle
        return handle.pid if handle is not None else None

    def get_connection_uri(self) -> str:
        """Return the mongodb:// URI for the configured port, whatever the state."""
        return self.config.connection_uri

    def is_running(self) -> bool:
        return self._state.phase is LifecycleState.RUNNING

    async def start(self) -> None:
        """
        Start mongod and wait until it accepts connections.

        Returns immediately when disabled or already running. While a
        startup is in flight, every caller waits on that same attempt.

        Raises:
            PortConflictError: If the port is already bound
            PreflightError: If the port probe fails for another reason
            SpawnError: If the OS cannot start the binary
            PrematureExitError: If mongod exits before it is ready
            StartupTimeoutError: If mongod is not ready within the startup timeout
            StartupAbortedError: If stop() is called while starting
        """
        if not self.config.enabled:
            logger.debug("MongoDB subprocess disabled; start() is a no-op")
            return

        if self._shutdown_task is not None and not self._shutdown_task.done():
            await asyncio.shield(self._shutdown_task)

        if self._state.phase is LifecycleState.RUNNING:
            return

        pending = self._state.pending
        if pending is None:
            pending = self._begin_startup()
        await asyncio.shield(pending.task)

    async def stop(self) -> None:
        """
        Stop mongod, escalating to SIGKILL after the grace period.

        A startup in flight is rejected with StartupAbortedError first.
        Never raises.
        """
        pending = self._state.pending
        if pending is not None and not pending.task.done():
            if pending.outcome.fail(StartupAbortedError("MongoDB subprocess stop requested during startup")):
                logger.info("Stop requested while MongoDB subprocess was starting")
            await asyncio.wait({pending.task})
        await self._stop_process()

    async def __aenter__(self) -> "MongoSubprocessManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def _begin_startup(self) -> PendingStartup:
        outcome = StartupOutcome()
        task = asyncio.create_task(self._run_startup(outcome), name="mongod-startup")
        task.add_done_callback(_mark_result_retrieved)
        pending = PendingStartup(task=task, outcome=outcome)
        self._state = begin_startup(self._state, pending)
        logger.info("Starting MongoDB subprocess on port %s", self.config.port)
        return pending

    async def _run_startup(self, outcome: StartupOutcome) -> None:
        loop = asyncio.get_running_loop()
        timer = loop.call_later(self.config.startup_timeout_seconds, self._on_startup_timeout, outcome)
        handle: Optional[ProcessHandle] = None
        readiness_watch: Optional[asyncio.Task] = None
        try:
            await check_port_available(self.config.port)
            if not outcome.settled:
                handle = await self._spawn(outcome)
                readiness_watch = asyncio.create_task(self._watch_readiness(handle.detector, outcome))
            await outcome.wait()
            if handle is not None and handle.returncode is not None:
                raise PrematureExitError(returncode=handle.returncode)
        except StartupError as exc:
            outcome.fail(exc)
            logger.error("MongoDB subprocess failed to start: %s", exc)
            await self._cleanup_failed_start(handle)
            raise
        except asyncio.CancelledError:
            outcome.fail(StartupAbortedError("MongoDB subprocess startup cancelled"))
            await self._cleanup_failed_start(handle)
            raise
        except Exception as exc:
            outcome.fail(StartupAbortedError(f"MongoDB subprocess startup crashed: {exc}"))
            logger.exception("Unexpected error while starting MongoDB subprocess")
            await self._cleanup_failed_start(handle)
            raise
        finally:
            timer.cancel()
            if readiness_watch is not None:
                readiness_watch.cancel()

        self._state = mark_running(self._state)
        logger.info("MongoDB subprocess ready at %s (PID %s)", self.get_connection_uri(), self.pid)

    async def _spawn(self, outcome: StartupOutcome) -> ProcessHandle:
        process = await launch_mongod(self.config)
        detector = ReadinessDetector(
            {"stdout": process.stdout, "stderr": process.stderr},
            self._readiness_predicate,
        )
        handle = ProcessHandle(process=process, detector=detector)
        self._state = attach_process(self._state, handle)
        detector.start()
        handle.exit_task = asyncio.create_task(self._watch_exit(handle, outcome), name="mongod-exit-watch")
        return handle

    async def _watch_readiness(self, detector: ReadinessDetector, outcome: StartupOutcome) -> None:
        if await detector.wait_ready():
            outcome.succeed()

    async def _watch_exit(self, handle: ProcessHandle, outcome: StartupOutcome) -> None:
        returncode = await handle.process.wait()
        if not outcome.fail(PrematureExitError(returncode=returncode)):
            if self._state.phase is LifecycleState.RUNNING and self._state.handle is handle:
                logger.warning("MongoDB subprocess (PID %s) exited unexpectedly with code %s", handle.pid, returncode)
                self._state = process_exited(self._state, handle)
                await handle.release()
                return
        self._state = process_exited(self._state, handle)

    def _on_startup_timeout(self, outcome: StartupOutcome) -> None:
        outcome.fail(StartupTimeoutError(timeout=self.config.startup_timeout_seconds))

    async def _cleanup_failed_start(self, handle: Optional[ProcessHandle]) -> None:
        await self._stop_process()
        if handle is not None:
            await handle.release()

    async def _stop_process(self) -> None:
        task = self._shutdown_task
        if task is None or task.done():
            if self._state.handle is None and self._state.pending is None:
                return
            task = asyncio.create_task(self._run_shutdown(), name="mongod-shutdown")
            self._shutdown_task = task
        await asyncio.shield(task)

    async def _run_shutdown(self) -> None:
        handle = self._state.handle
        if handle is not None:
            self._state = begin_stopping(self._state)
            returncode = await terminate_process(
                handle.process,
                grace_seconds=self.config.shutdown_grace_seconds,
                force_timeout_seconds=self.config.force_kill_timeout_seconds,
            )
            if returncode is None and handle.exit_task is not None:
                # Survived SIGKILL; stop waiting on it.
                handle.exit_task.cancel()
            self._state = process_exited(self._state, handle)
            await handle.release()
        self._state = mark_stopped(self._state)
        logger.info("MongoDB subprocess stopped")


def _mark_result_retrieved(task: asyncio.Task) -> None:
    """Mark a startup failure as observed even if every caller was cancelled."""
    if not task.cancelled():
        task.exception()

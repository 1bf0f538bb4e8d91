"""Pure transition functions over the controller's lifecycle state.

Each function takes the current ``ControllerState`` and returns a new one.
None of them touch the process; the controller performs side effects and
then records the result here.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Optional

from ..errors import InvalidTransitionError
from ..lifecycle_state import LifecycleState
from .process_handle import ProcessHandle
from .startup_outcome import StartupOutcome


@dataclass(frozen=True)
class PendingStartup:
    """The single in-flight startup attempt shared by concurrent callers."""

    task: asyncio.Task
    outcome: StartupOutcome


@dataclass(frozen=True)
class ControllerState:
    phase: LifecycleState = LifecycleState.STOPPED
    handle: Optional[ProcessHandle] = None
    pending: Optional[PendingStartup] = None


def begin_startup(state: ControllerState, pending: PendingStartup) -> ControllerState:
    """STOPPED -> STARTING."""
    if state.phase is not LifecycleState.STOPPED or state.pending is not None:
        raise InvalidTransitionError("begin startup", state.phase)
    return ControllerState(phase=LifecycleState.STARTING, pending=pending)


def attach_process(state: ControllerState, handle: ProcessHandle) -> ControllerState:
    """Record the spawned process during STARTING."""
    if state.phase is not LifecycleState.STARTING or state.handle is not None:
        raise InvalidTransitionError("attach a process", state.phase)
    return replace(state, handle=handle)


def mark_running(state: ControllerState) -> ControllerState:
    """STARTING -> RUNNING; the pending startup is cleared."""
    if state.phase is not LifecycleState.STARTING or state.handle is None:
        raise InvalidTransitionError("mark running", state.phase)
    return replace(state, phase=LifecycleState.RUNNING, pending=None)


def begin_stopping(state: ControllerState) -> ControllerState:
    """STARTING or RUNNING -> STOPPING."""
    if state.phase not in (LifecycleState.STARTING, LifecycleState.RUNNING):
        raise InvalidTransitionError("begin stopping", state.phase)
    return replace(state, phase=LifecycleState.STOPPING)


def process_exited(state: ControllerState, handle: ProcessHandle) -> ControllerState:
    """Drop *handle* once its process exits.

    A RUNNING controller falls back to STOPPED. STARTING and STOPPING are
    left for the startup and shutdown paths to finish.
    """
    if state.handle is not handle:
        return state
    phase = LifecycleState.STOPPED if state.phase is LifecycleState.RUNNING else state.phase
    return replace(state, phase=phase, handle=None)


def mark_stopped(state: ControllerState) -> ControllerState:
    """Any state -> STOPPED with no handle and no pending startup."""
    return ControllerState()

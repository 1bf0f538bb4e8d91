"""
Canonical lifecycle state definitions for the mongod subprocess.

A controller holds exactly one of these values at a time; transitions are
applied by the pure functions in ``subprocess_manager_helpers.state_machine``.
"""

from enum import Enum


class LifecycleState(Enum):
    """
    Lifecycle states for a supervised mongod process.

    STOPPED and RUNNING are stable; STARTING and STOPPING only last while a
    startup attempt or a shutdown is in flight.
    """

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"

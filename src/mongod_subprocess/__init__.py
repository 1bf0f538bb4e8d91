"""Supervise a local mongod process for the lifetime of a host application."""

from .errors import (
    InvalidTransitionError,
    MongoSubprocessError,
    PortConflictError,
    PrematureExitError,
    PreflightError,
    SpawnError,
    StartupAbortedError,
    StartupError,
    StartupTimeoutError,
)
from .lifecycle_state import LifecycleState
from .subprocess_config import SubprocessConfig, config_from_env, resolve_config
from .subprocess_manager import MongoSubprocessManager

__all__ = [
    "InvalidTransitionError",
    "LifecycleState",
    "MongoSubprocessError",
    "MongoSubprocessManager",
    "PortConflictError",
    "PrematureExitError",
    "PreflightError",
    "SpawnError",
    "StartupAbortedError",
    "StartupError",
    "StartupTimeoutError",
    "SubprocessConfig",
    "config_from_env",
    "resolve_config",
]

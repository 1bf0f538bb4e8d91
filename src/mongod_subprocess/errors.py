"""Exception classes for the mongod subprocess lifecycle.

Every startup failure surfaces to ``start()`` callers as a ``StartupError``
subclass. Shutdown never raises; forced termination is logged instead.

Exception classes support two patterns:
1. No-argument raise: raise SpawnError()
2. Contextual attributes: err = PortConflictError(port=27017); raise err
"""

from typing import Any, Optional


class MongoSubprocessError(Exception):
    """Base exception for all mongod subprocess errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "MongoDB subprocess error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class StartupError(MongoSubprocessError):
    """MongoDB subprocess failed to start."""


class PreflightError(StartupError):
    """Port preflight check failed."""

    def __init__(self, message: str = "", *, port: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, port=port, **kwargs)


class PortConflictError(PreflightError):
    """Target port is already bound by another process."""

    def __init__(
        self,
        message: str = "",
        *,
        port: Optional[int] = None,
        holder: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        if not message and port is not None:
            message = f"Port {port} is already in use. Cannot start MongoDB subprocess."
            if holder:
                message += f" Held by {holder}."
        super().__init__(message, port=port, holder=holder, **kwargs)


class SpawnError(StartupError):
    """Operating system failed to create the MongoDB process."""


class PrematureExitError(StartupError):
    """MongoDB process exited before signaling readiness."""

    def __init__(self, message: str = "", *, returncode: Optional[int] = None, **kwargs: Any) -> None:
        if not message:
            message = f"MongoDB subprocess exited with code {returncode} before starting"
        super().__init__(message, returncode=returncode, **kwargs)


class StartupTimeoutError(StartupError):
    """MongoDB process did not report readiness within the startup timeout."""

    def __init__(self, message: str = "", *, timeout: Optional[float] = None, **kwargs: Any) -> None:
        if not message and timeout is not None:
            message = f"MongoDB subprocess startup timeout ({timeout:g}s)"
        super().__init__(message, timeout=timeout, **kwargs)


class StartupAbortedError(StartupError):
    """Startup attempt was abandoned because stop() was requested."""


class InvalidTransitionError(MongoSubprocessError, RuntimeError):
    """Lifecycle state transition is not allowed from the current state."""

    def __init__(self, action: str, phase: Any) -> None:
        super().__init__(f"Cannot {action} while {phase.value}", action=action, phase=phase)


__all__ = [
    "InvalidTransitionError",
    "MongoSubprocessError",
    "PortConflictError",
    "PrematureExitError",
    "PreflightError",
    "SpawnError",
    "StartupAbortedError",
    "StartupError",
    "StartupTimeoutError",
]

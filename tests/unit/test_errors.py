import pytest

from mongod_subprocess.errors import (
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
from mongod_subprocess.lifecycle_state import LifecycleState


def test_port_conflict_message_and_attributes():
    err = PortConflictError(port=27017)

    assert str(err) == "Port 27017 is already in use. Cannot start MongoDB subprocess."
    assert err.port == 27017
    assert err.holder is None


def test_port_conflict_names_holder():
    err = PortConflictError(port=27017, holder="mongod (PID 42)")

    assert str(err).endswith("Held by mongod (PID 42).")


def test_premature_exit_message():
    err = PrematureExitError(returncode=3)

    assert str(err) == "MongoDB subprocess exited with code 3 before starting"
    assert err.returncode == 3


def test_startup_timeout_message():
    err = StartupTimeoutError(timeout=30.0)

    assert str(err) == "MongoDB subprocess startup timeout (30s)"
    assert err.timeout == 30.0


def test_default_messages_come_from_docstrings():
    assert str(SpawnError()) == "Operating system failed to create the MongoDB process."
    assert str(StartupAbortedError()) == "Startup attempt was abandoned because stop() was requested."


def test_keyword_context_is_stored():
    err = SpawnError("boom", binary="/usr/bin/mongod")

    assert err.binary == "/usr/bin/mongod"


@pytest.mark.parametrize(
    "error_cls",
    [PreflightError, PortConflictError, SpawnError, PrematureExitError, StartupTimeoutError, StartupAbortedError],
)
def test_startup_errors_share_a_base(error_cls):
    assert issubclass(error_cls, StartupError)
    assert issubclass(error_cls, MongoSubprocessError)


def test_port_conflict_is_a_preflight_error():
    assert issubclass(PortConflictError, PreflightError)


def test_invalid_transition_error():
    err = InvalidTransitionError("mark running", LifecycleState.STOPPED)

    assert isinstance(err, RuntimeError)
    assert str(err) == "Cannot mark running while stopped"
    assert err.phase is LifecycleState.STOPPED

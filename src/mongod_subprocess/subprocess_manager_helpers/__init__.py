"""Helper modules for MongoSubprocessManager."""

from .port_preflight import check_port_available, describe_port_holder
from .process_handle import ProcessHandle
from .process_launcher import build_command_args, launch_mongod, prepare_filesystem
from .readiness_detector import (
    READINESS_MARKER,
    OutputMultiplexer,
    ReadinessDetector,
    ReadinessPredicate,
    marker_predicate,
)
from .shutdown_coordinator import terminate_process
from .startup_outcome import StartupOutcome
from .state_machine import (
    ControllerState,
    PendingStartup,
    attach_process,
    begin_startup,
    begin_stopping,
    mark_running,
    mark_stopped,
    process_exited,
)

__all__ = [
    "READINESS_MARKER",
    "ControllerState",
    "OutputMultiplexer",
    "PendingStartup",
    "ProcessHandle",
    "ReadinessDetector",
    "ReadinessPredicate",
    "StartupOutcome",
    "attach_process",
    "begin_startup",
    "begin_stopping",
    "build_command_args",
    "check_port_available",
    "describe_port_holder",
    "launch_mongod",
    "mark_running",
    "mark_stopped",
    "marker_predicate",
    "prepare_filesystem",
    "process_exited",
    "terminate_process",
]

"""Process tracking and sampling engine."""

from .cancellation import CancellationFlag, InterruptHandler, install_interrupt_handler
from .process_monitor import ProcessMonitor, monitor_process
from .tracked_process import (
    ExternalProcess,
    InternalProcess,
    TrackedProcess,
    open_tracked_process,
    release_child,
)

__all__ = [
    "CancellationFlag",
    "ExternalProcess",
    "InternalProcess",
    "InterruptHandler",
    "ProcessMonitor",
    "TrackedProcess",
    "install_interrupt_handler",
    "monitor_process",
    "open_tracked_process",
    "release_child",
]

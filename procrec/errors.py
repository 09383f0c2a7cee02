"""Exception hierarchy for procrec."""
from typing import Optional, Sequence


class ProcRecError(Exception):
    """Base class for all procrec errors"""


class ConfigurationError(ProcRecError):
    """Invalid combination of recorder options, detected before any process is touched"""


class ProcessAccessError(ProcRecError):
    """A stats handle could not be opened for a process identifier"""

    def __init__(self, pid: int, cause: Optional[BaseException] = None):
        self.pid = pid
        self.cause = cause
        message = f"Cannot access process {pid}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class SpawnError(ProcRecError):
    """The requested program could not be started"""

    def __init__(self, command: Sequence[str], cause: Optional[BaseException] = None):
        self.command = list(command)
        self.cause = cause
        message = f"Cannot spawn {' '.join(self.command)!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class StatsUnavailableError(ProcRecError):
    """CPU or memory figures could not be read because the process is gone"""

    def __init__(self, pid: int, cause: Optional[BaseException] = None):
        self.pid = pid
        self.cause = cause
        message = f"Stats unavailable for process {pid}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class HandlerInstallError(ProcRecError):
    """The interrupt handler could not be installed"""


class SamplingError(ProcRecError):
    """
    A measurement failed on a tick where the target was reported running.

    The samples taken before the failure are kept in `recording`.
    """

    def __init__(self, recording, cause: BaseException):
        self.recording = recording
        self.cause = cause
        super().__init__(f"Sampling aborted after {len(recording)} sample(s): {cause}")

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    SAMPLING_ABORTED = 1
    STARTUP_FAILED = 2
    REPORTING_FAILED = 3

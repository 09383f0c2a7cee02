from enum import Enum


class StopReason(Enum):
    CANCELLED = "cancelled"
    TARGET_EXITED = "target_exited"
    DURATION_ELAPSED = "duration_elapsed"
    FAILED = "failed"

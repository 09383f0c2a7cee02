from enum import Enum


class MonitorState(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"
    STOPPED = "stopped"

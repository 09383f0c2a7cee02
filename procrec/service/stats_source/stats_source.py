from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MemoryFootprint:
    resident_kb: int
    virtual_kb: int


class StatsHandle(ABC):
    """Read-only view of one OS process' resource counters.

    Subclasses translate their backend's failures into StatsUnavailableError.
    """

    # True when cpu_percent() returns a ready-made percentage
    reports_cpu_percent: bool = False

    def __init__(self, pid: int) -> None:
        self.pid = pid

    @abstractmethod
    def cpu_time_consumed(self) -> float:
        """Cumulative user + system CPU time in seconds."""
        pass

    @abstractmethod
    def memory_footprint(self) -> MemoryFootprint:
        pass

    @abstractmethod
    def num_threads(self) -> int:
        pass

    @abstractmethod
    def is_alive(self) -> bool:
        pass

    def cpu_percent(self) -> float:
        raise NotImplementedError(f"{type(self).__name__} does not report CPU percent")


class StatsSource(ABC):
    """Opens stats handles for process identifiers."""

    @abstractmethod
    def open(self, pid: int) -> StatsHandle:
        """
        Open a stats handle for `pid`.

        Raises:
            ProcessAccessError: if the process does not exist or is inaccessible
        """
        pass

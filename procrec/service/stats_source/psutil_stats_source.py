"""
psutil backed process statistics.

PsutilStatsSource exposes raw cumulative CPU time and leaves the percentage
derivation to the tracked process. PsutilPercentStatsSource hands out
psutil's own cpu_percent figure instead.
"""
import psutil

from procrec.errors import ProcessAccessError, StatsUnavailableError
from procrec.service.stats_source.stats_source import MemoryFootprint, StatsHandle, StatsSource
from procrec.util.log_config import get_logger

logger = get_logger(__name__)

# psutil failures that mean the process can no longer be inspected
PROCESS_GONE = (psutil.NoSuchProcess, psutil.ZombieProcess, psutil.AccessDenied)


class PsutilStatsHandle(StatsHandle):

    def __init__(self, process: psutil.Process) -> None:
        super().__init__(process.pid)
        self.process = process

    def cpu_time_consumed(self) -> float:
        try:
            times = self.process.cpu_times()
        except PROCESS_GONE as e:
            raise StatsUnavailableError(self.pid, e) from e
        return times.user + times.system

    def memory_footprint(self) -> MemoryFootprint:
        try:
            mem_info = self.process.memory_info()
        except PROCESS_GONE as e:
            raise StatsUnavailableError(self.pid, e) from e
        return MemoryFootprint(resident_kb=mem_info.rss // 1024, virtual_kb=mem_info.vms // 1024)

    def num_threads(self) -> int:
        try:
            return self.process.num_threads()
        except PROCESS_GONE as e:
            raise StatsUnavailableError(self.pid, e) from e

    def is_alive(self) -> bool:
        try:
            if not self.process.is_running():
                return False
            return self.process.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False


class PsutilPercentStatsHandle(PsutilStatsHandle):

    reports_cpu_percent = True

    def __init__(self, process: psutil.Process) -> None:
        super().__init__(process)
        # Initialize CPU percent (first call returns 0.0)
        try:
            self.process.cpu_percent(interval=None)
        except PROCESS_GONE as e:
            raise ProcessAccessError(self.pid, e) from e

    def cpu_percent(self) -> float:
        try:
            return float(self.process.cpu_percent(interval=None))
        except PROCESS_GONE as e:
            raise StatsUnavailableError(self.pid, e) from e


class PsutilStatsSource(StatsSource):

    handle_class = PsutilStatsHandle

    def open(self, pid: int) -> StatsHandle:
        try:
            process = psutil.Process(pid)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            raise ProcessAccessError(pid, e) from e
        except ValueError as e:
            # negative pid
            raise ProcessAccessError(pid, e) from e
        logger.debug(f"Opened stats handle for PID {pid} ({self.handle_class.__name__})")
        return self.handle_class(process)


class PsutilPercentStatsSource(PsutilStatsSource):

    handle_class = PsutilPercentStatsHandle


def available_cores() -> int:
    """Number of logical CPUs, at least 1."""
    return psutil.cpu_count(logical=True) or 1

"""Process statistics sources."""

from procrec.consts.CpuMode import CpuMode
from .psutil_stats_source import PsutilPercentStatsSource, PsutilStatsSource
from .stats_source import MemoryFootprint, StatsHandle, StatsSource


def build_stats_source(cpu_mode: CpuMode) -> StatsSource:
    if cpu_mode == CpuMode.DELTA:
        return PsutilStatsSource()
    elif cpu_mode == CpuMode.PSUTIL:
        return PsutilPercentStatsSource()
    raise ValueError(f"Unsupported CPU mode: {cpu_mode}")


__all__ = [
    "MemoryFootprint",
    "PsutilPercentStatsSource",
    "PsutilStatsSource",
    "StatsHandle",
    "StatsSource",
    "build_stats_source",
]

from enum import Enum


class CpuMode(Enum):
    # Δcpu_time / Δwall_clock derived by the tracked process
    DELTA = "delta"
    # psutil.Process.cpu_percent consumed as-is
    PSUTIL = "psutil"

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class Sample:
    """Single process resource usage measurement"""
    ts: float           # seconds since the first accepted sample
    pid: int
    cpu: float          # percent over the preceding interval
    rss: int            # resident set size, kB
    vsize: int          # virtual memory size, kB
    num_threads: int = 0

    def __str__(self) -> str:
        return (f"{self.ts:.02f} PID {self.pid} CPU% {self.cpu:.02f} "
                f"RSS {self.rss} VSIZE {self.vsize} THREADS {self.num_threads}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

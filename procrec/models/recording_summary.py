from dataclasses import dataclass, asdict
from typing import Dict


@dataclass
class RecordingSummary:
    """Aggregated statistics over one recording"""
    # CPU statistics
    peak_cpu_percent: float
    avg_cpu_percent: float
    min_cpu_percent: float
    p50_cpu_percent: float
    p95_cpu_percent: float
    samples_count: int
    sampling_interval: float

    # Memory statistics (kB)
    peak_rss_kb: int
    peak_vsize_kb: int

    # Timestamp of the last sample
    recorded_seconds: float

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    def format_lines(self) -> list[str]:
        """Format summary statistics for display."""
        return [
            f"samples: {self.samples_count} (interval={self.sampling_interval:.3f}s, "
            f"recorded={self.recorded_seconds:.2f}s)",
            f"cpu: avg={self.avg_cpu_percent:.2f}%  min={self.min_cpu_percent:.2f}%  "
            f"p50={self.p50_cpu_percent:.2f}%  p95={self.p95_cpu_percent:.2f}%  "
            f"peak={self.peak_cpu_percent:.2f}%",
            f"memory: peak_rss={self.peak_rss_kb / 1024:.1f} MB  "
            f"peak_vsize={self.peak_vsize_kb / 1024:.1f} MB",
        ]

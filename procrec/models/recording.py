"""Ordered, append-only sequence of samples taken during one run."""
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from procrec.models.recording_summary import RecordingSummary
from procrec.models.sample import Sample
from procrec.util.file_utils import ensure_parent

COLUMNS = ["ts", "pid", "cpu", "rss", "vsize", "num_threads"]


class Recording:

    def __init__(self) -> None:
        self._samples: List[Sample] = []

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> Sample:
        return self._samples[index]

    def __bool__(self) -> bool:
        return bool(self._samples)

    def __repr__(self) -> str:
        return f"Recording(samples={len(self._samples)})"

    @property
    def samples(self) -> Tuple[Sample, ...]:
        return tuple(self._samples)

    @property
    def last(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {"samples": [s.to_dict() for s in self._samples]}

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([s.to_dict() for s in self._samples], columns=COLUMNS)

    def save_csv(self, path: Path) -> Path:
        """Write all samples to a CSV file and return its path."""
        path = ensure_parent(path)
        self.to_dataframe().to_csv(path, index=False)
        return path

    def summary(self, interval: float) -> Optional[RecordingSummary]:
        """
        Calculate statistics over the recording.

        Args:
            interval: Sampling interval the recording was taken with

        Returns:
            RecordingSummary or None if the recording is empty
        """
        if not self._samples:
            return None

        cpu_values = np.array([s.cpu for s in self._samples], dtype=float)

        return RecordingSummary(
            peak_cpu_percent=float(cpu_values.max()),
            avg_cpu_percent=float(cpu_values.mean()),
            min_cpu_percent=float(cpu_values.min()),
            p50_cpu_percent=float(np.percentile(cpu_values, 50)),
            p95_cpu_percent=float(np.percentile(cpu_values, 95)),
            samples_count=len(self._samples),
            sampling_interval=interval,
            peak_rss_kb=max(s.rss for s in self._samples),
            peak_vsize_kb=max(s.vsize for s in self._samples),
            recorded_seconds=self._samples[-1].ts,
        )

"""
Plot a recording as CPU and memory time series.

Also writes the plain sample-line data file, one `str(sample)` per line,
that external plotting tools such as gnuplot can consume.
"""
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from procrec.models.plot_params import PlotParams
from procrec.models.recording import Recording
from procrec.util.file_utils import ensure_parent
from procrec.util.log_config import get_logger

logger = get_logger(__name__)

CPU_COLOR = '#1f77b4'    # blue
RSS_COLOR = '#ff7f0e'    # orange
VSIZE_COLOR = '#2ca02c'  # green


def write_data_file(recording: Recording, path: Path) -> Path:
    path = ensure_parent(path)
    with open(path, 'w', encoding='utf-8') as f:
        for sample in recording:
            f.write(f"{sample}\n")
    return path


class PlotReporter:

    def __init__(self, params: PlotParams, data_file: Optional[Path] = None):
        self.params = params
        self.data_file = data_file

    def report(self, recording: Recording) -> Optional[Path]:
        """
        Plot `recording`.

        Returns:
            Path of the saved image, or None if it was only displayed
        """
        if self.data_file:
            write_data_file(recording, self.data_file)
            logger.info(f"✓ Data file written: {self.data_file}")

        ts = np.array([s.ts for s in recording], dtype=float)
        cpu = np.array([s.cpu for s in recording], dtype=float)
        rss_mb = np.array([s.rss for s in recording], dtype=float) / 1024
        vsize_mb = np.array([s.vsize for s in recording], dtype=float) / 1024

        fig, (ax_cpu, ax_mem) = plt.subplots(2, 1, sharex=True, figsize=self.params.figsize)

        ax_cpu.plot(ts, cpu, color=CPU_COLOR, marker='.', linewidth=1)
        ax_cpu.set_ylabel('CPU (%)')
        ax_cpu.set_title(self.params.title)
        ax_cpu.grid(True, alpha=0.3)

        ax_mem.plot(ts, rss_mb, color=RSS_COLOR, marker='.', linewidth=1, label='RSS')
        ax_mem.plot(ts, vsize_mb, color=VSIZE_COLOR, marker='.', linewidth=1, label='VSIZE')
        ax_mem.set_ylabel('Memory (MB)')
        ax_mem.set_xlabel('Time (seconds)')
        ax_mem.grid(True, alpha=0.3)
        ax_mem.legend(loc='upper left')

        fig.tight_layout()

        output_path = None
        try:
            if self.params.output_path:
                output_path = ensure_parent(Path(self.params.output_path))
                fig.savefig(output_path, dpi=self.params.dpi)
                logger.info(f"✓ Saved plot: {output_path}")
            if self.params.show:
                plt.show()
        finally:
            plt.close(fig)
        return output_path

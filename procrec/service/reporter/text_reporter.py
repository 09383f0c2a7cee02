"""Textual output of samples, recordings and summaries."""
import sys
from typing import Optional, TextIO

from tabulate import tabulate

from procrec.models.recording import Recording
from procrec.models.recording_summary import RecordingSummary
from procrec.models.sample import Sample

TABLE_HEADERS = ["t (s)", "PID", "CPU %", "RSS (kB)", "VSIZE (kB)", "Threads"]


class TextReporter:

    def __init__(self, stream: Optional[TextIO] = None, table: bool = False):
        self.stream = stream or sys.stdout
        self.table = table

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def report_sample(self, sample: Sample) -> None:
        self._write(str(sample))
        self.stream.flush()

    def report_recording(self, recording: Recording) -> None:
        if not self.table:
            for sample in recording:
                self._write(str(sample))
            return

        rows = [
            [f"{s.ts:.2f}", s.pid, f"{s.cpu:.2f}", s.rss, s.vsize, s.num_threads]
            for s in recording
        ]
        self._write(tabulate(rows, headers=TABLE_HEADERS, tablefmt="github", stralign="left", numalign="right"))

    def report_summary(self, summary: Optional[RecordingSummary]) -> None:
        self._write("\n=== Summary ===")
        if summary is None:
            self._write("no samples recorded")
            return
        for line in summary.format_lines():
            self._write(line)

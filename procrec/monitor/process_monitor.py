"""
Process Monitor Module

Samples CPU and memory usage of a tracked process at a fixed interval and
accumulates the samples into a Recording. Runs on the calling thread.
"""
import time
from typing import Callable, Optional

from procrec.consts.MonitorState import MonitorState
from procrec.consts.StopReason import StopReason
from procrec.errors import SamplingError, StatsUnavailableError
from procrec.models.recording import Recording
from procrec.models.sample import Sample
from procrec.monitor.cancellation import CancellationFlag
from procrec.monitor.tracked_process import TrackedProcess
from procrec.util.log_config import get_logger

logger = get_logger(__name__)

SampleCallback = Callable[[Sample], None]


class ProcessMonitor:
    """Monitor resource usage of a tracked process"""

    def __init__(
        self,
        process: TrackedProcess,
        interval: float = 2.0,
        duration: Optional[float] = None,
        cancel_flag: Optional[CancellationFlag] = None,
        on_sample: Optional[SampleCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize process monitor.

        Args:
            process: Tracked process to sample
            interval: Delay before each sample in seconds (not drift corrected)
            duration: Stop after the first sample whose timestamp exceeds this
            cancel_flag: Checked after every delay; stops the loop when set
            on_sample: Called with each sample as soon as it is recorded
            sleep: Delay function (default: time.sleep)
            clock: Monotonic clock for sample timestamps
        """
        self.process = process
        self.interval = interval
        self.duration = duration
        self.cancel_flag = cancel_flag or CancellationFlag()
        self.on_sample = on_sample
        self._sleep = sleep
        self._clock = clock

        self.recording = Recording()
        self.state = MonitorState.IDLE
        self.stop_reason: Optional[StopReason] = None
        self._start: Optional[float] = None

    def run(self) -> Recording:
        """
        Sample until cancelled, the target exits, or the duration elapses.

        Returns:
            The recording

        Raises:
            SamplingError: if measuring fails while the target is running;
                the samples taken so far are attached to the error
        """
        if self.state != MonitorState.IDLE:
            raise RuntimeError("ProcessMonitor.run() can only be called once")

        self._prime_cpu_percent()

        while True:
            self._sleep(self.interval)

            if self.cancel_flag.is_set():
                logger.info("Cancellation requested, stopping")
                self._stop(StopReason.CANCELLED)
                break

            if not self.process.is_running():
                logger.info(f"PID {self.process.pid} has exited, stopping")
                self._stop(StopReason.TARGET_EXITED)
                break

            sample = self._take_sample()
            self.recording.append(sample)
            self._emit(sample)

            if self.duration is not None and sample.ts > self.duration:
                logger.info(f"Duration of {self.duration}s elapsed, stopping")
                self._stop(StopReason.DURATION_ELAPSED)
                break

        logger.debug(f"Recorded {len(self.recording)} sample(s) ({self.stop_reason.value})")
        return self.recording

    def _prime_cpu_percent(self) -> None:
        # The first cpu_percent() only sets the baseline; its value is dropped
        try:
            self.process.cpu_percent()
        except StatsUnavailableError as e:
            if self.process.is_running():
                self._stop(StopReason.FAILED)
                raise SamplingError(self.recording, e) from e
            # Exit is picked up by the first tick

    def _take_sample(self) -> Sample:
        try:
            cpu = self.process.cpu_percent()
            mem = self.process.memory_info()
            num_threads = self.process.num_threads()
        except StatsUnavailableError as e:
            logger.error(f"PID {self.process.pid} reported running but stats are unavailable: {e}")
            self._stop(StopReason.FAILED)
            raise SamplingError(self.recording, e) from e

        now = self._clock()
        if self._start is None:
            self._start = now
            self.state = MonitorState.SAMPLING
        elapsed = now - self._start

        return Sample(
            ts=elapsed,
            pid=self.process.pid,
            cpu=cpu,
            rss=mem.resident_kb,
            vsize=mem.virtual_kb,
            num_threads=num_threads,
        )

    def _emit(self, sample: Sample) -> None:
        if self.on_sample is None:
            return
        try:
            self.on_sample(sample)
        except Exception as e:
            logger.warning(f"Sample reporter error: {e}")

    def _stop(self, reason: StopReason) -> None:
        self.state = MonitorState.STOPPED
        self.stop_reason = reason


def monitor_process(
    process: TrackedProcess,
    interval: float = 2.0,
    duration: Optional[float] = None,
    cancel_flag: Optional[CancellationFlag] = None,
    on_sample: Optional[SampleCallback] = None,
) -> Recording:
    """
    Sample `process` and close it afterwards.

    Closing an InternalProcess terminates the child if it is still running
    and blocks until it is reaped, on every exit path.

    Returns:
        The recording

    Raises:
        SamplingError: if sampling aborted; carries the partial recording
    """
    with process:
        monitor = ProcessMonitor(
            process,
            interval=interval,
            duration=duration,
            cancel_flag=cancel_flag,
            on_sample=on_sample,
        )
        return monitor.run()

"""
Tracked Process Module

A tracked process is either an ExternalProcess (attached by PID, never
signalled, killed or waited on) or an InternalProcess (spawned by procrec,
owned, and always reaped on close). Both present the same read-only
measurement interface to the sampling loop.
"""
import subprocess
import time
from typing import Callable, Optional, Sequence, Union

from procrec.config.recorder_config import DEFAULT_TERMINATE_TIMEOUT
from procrec.consts.TrackingMode import TrackingMode
from procrec.errors import ConfigurationError, ProcessAccessError, StatsUnavailableError
from procrec.service.spawner.child_process import ChildProcess, SubprocessSpawner
from procrec.service.stats_source.psutil_stats_source import PsutilStatsSource, available_cores
from procrec.service.stats_source.stats_source import MemoryFootprint, StatsHandle, StatsSource
from procrec.util.log_config import get_logger

logger = get_logger(__name__)


class _ProcessView:
    """Measurement side shared by both tracking modes."""

    mode: TrackingMode

    def __init__(self, stats: StatsHandle, clock: Callable[[], float] = time.monotonic, cores: int = 1) -> None:
        self._stats = stats
        self._pid = stats.pid
        self._clock = clock
        self._cores = max(1, cores)
        self._last_cpu_time: Optional[float] = None
        self._last_wall: Optional[float] = None
        # Set once is_running() has reported False; the PID is stale from then on
        self._exited = False
        self._closed = False

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def process(self) -> StatsHandle:
        return self._stats

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_not_exited(self) -> None:
        if self._exited:
            raise StatsUnavailableError(self._pid, ProcessLookupError("process has exited"))

    def cpu_percent(self) -> float:
        """
        CPU utilization since the previous call, in percent.

        The first call only establishes the baseline; its value is 0.0 and
        carries no meaning.

        Raises:
            StatsUnavailableError: if the process has exited
        """
        self._ensure_not_exited()
        if self._stats.reports_cpu_percent:
            return self._stats.cpu_percent() / self._cores

        consumed = self._stats.cpu_time_consumed()
        now = self._clock()
        percent = 0.0
        if self._last_wall is not None:
            elapsed = now - self._last_wall
            if elapsed > 0:
                percent = (consumed - self._last_cpu_time) / elapsed * 100.0 / self._cores
        self._last_cpu_time = consumed
        self._last_wall = now
        return percent

    def memory_info(self) -> MemoryFootprint:
        """
        Current resident and virtual memory size in kB.

        Raises:
            StatsUnavailableError: if the process has exited
        """
        self._ensure_not_exited()
        return self._stats.memory_footprint()

    def num_threads(self) -> int:
        self._ensure_not_exited()
        return self._stats.num_threads()

    def is_running(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pid={self._pid}, exited={self._exited})"


class ExternalProcess(_ProcessView):
    """A process procrec merely observes."""

    mode = TrackingMode.EXTERNAL

    @classmethod
    def attach(cls, stats_source: StatsSource, pid: int, **kwargs) -> "ExternalProcess":
        """
        Raises:
            ProcessAccessError: if `pid` does not exist or is inaccessible
        """
        stats = stats_source.open(pid)
        logger.info(f"Attached to PID {pid}")
        return cls(stats, **kwargs)

    def is_running(self) -> bool:
        if self._exited:
            return False
        if not self._stats.is_alive():
            logger.debug(f"PID {self._pid} is no longer running")
            self._exited = True
        return not self._exited

    def close(self) -> None:
        # The process is not ours: nothing to signal or reap
        self._closed = True


class InternalProcess(_ProcessView):
    """A process spawned by procrec. Closing it always reaps the child."""

    mode = TrackingMode.INTERNAL

    def __init__(
        self,
        stats: StatsHandle,
        child: ChildProcess,
        terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
        **kwargs
    ) -> None:
        super().__init__(stats, **kwargs)
        self._child = child
        self._terminate_timeout = terminate_timeout
        self.exit_status: Optional[int] = None

    @classmethod
    def spawn(
        cls,
        stats_source: StatsSource,
        spawner: SubprocessSpawner,
        command: Sequence[str],
        terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
        **kwargs
    ) -> "InternalProcess":
        """
        Spawn `command` and attach a stats handle to the child.

        If the stats handle cannot be opened the child is terminated and
        reaped before ProcessAccessError is raised.

        Raises:
            SpawnError: if the program cannot be started
            ProcessAccessError: if the spawned child cannot be inspected
        """
        child = spawner.spawn(command[0], list(command[1:]))
        try:
            stats = stats_source.open(child.pid)
        except ProcessAccessError:
            logger.warning(f"Cannot attach to spawned PID {child.pid}, cleaning up")
            release_child(child, terminate_timeout)
            raise
        logger.info(f"Spawned PID {child.pid}: {' '.join(command)}")
        return cls(stats, child, terminate_timeout=terminate_timeout, **kwargs)

    @property
    def child(self) -> ChildProcess:
        return self._child

    def is_running(self) -> bool:
        # Only the child's own exit status counts; the OS may already have
        # handed its PID to another process.
        if self._exited:
            return False
        status = self._child.try_join()
        if status is not None:
            logger.debug(f"Spawned PID {self._pid} exited with status {status}")
            self.exit_status = status
            self._exited = True
        return not self._exited

    def close(self) -> None:
        """Terminate the child if still running and block until it is reaped."""
        if self._closed:
            return
        self._closed = True
        status = release_child(self._child, self._terminate_timeout)
        if status is not None:
            self.exit_status = status
        self._exited = True

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()


TrackedProcess = Union[ExternalProcess, InternalProcess]


def release_child(child: ChildProcess, terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT) -> Optional[int]:
    """
    Reap `child`, terminating it first if it is still running.

    Escalates to kill when terminate does not take effect within
    `terminate_timeout`. Failures are logged as warnings and never raised.

    Returns:
        The exit status, or None if the child could not be reaped
    """
    try:
        status = child.try_join()
    except OSError as e:
        logger.warning(f"Cannot poll spawned PID {child.pid}: {e}")
        status = None
    if status is not None:
        return status

    logger.info(f"Terminating spawned PID {child.pid}")
    try:
        child.terminate()
    except OSError as e:
        logger.warning(f"Failed to terminate PID {child.pid}: {e}")

    try:
        return child.join(timeout=terminate_timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"PID {child.pid} did not exit within {terminate_timeout}s, killing it")
    except OSError as e:
        logger.warning(f"Failed to reap PID {child.pid}: {e}")
        return None

    try:
        child.kill()
        return child.join(timeout=terminate_timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Failed to kill and reap PID {child.pid}: {e}")
        return None


def open_tracked_process(
    pid: Optional[int] = None,
    command: Optional[Sequence[str]] = None,
    stats_source: Optional[StatsSource] = None,
    spawner: Optional[SubprocessSpawner] = None,
    normalize_cores: bool = False,
    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
) -> TrackedProcess:
    """
    Attach to `pid` or spawn `command`; exactly one of them must be given.

    Args:
        pid: Process ID of an already running process
        command: Program and arguments to spawn
        stats_source: Where CPU and memory figures come from (default: psutil)
        spawner: Spawn facility for `command` (default: subprocess)
        normalize_cores: Divide CPU percent by the number of logical CPUs
        terminate_timeout: Seconds to wait for a spawned child after terminate
        clock: Monotonic clock used for CPU percent derivation

    Raises:
        ConfigurationError: if both or neither of pid and command are given
        ProcessAccessError: if the target cannot be inspected
        SpawnError: if `command` cannot be started
    """
    if (pid is None) == (command is None):
        raise ConfigurationError("Exactly one of a PID or a command must be given")
    if command is not None and len(command) == 0:
        raise ConfigurationError("Command must not be empty")

    stats_source = stats_source or PsutilStatsSource()
    cores = available_cores() if normalize_cores else 1

    if pid is not None:
        return ExternalProcess.attach(stats_source, pid, clock=clock, cores=cores)

    return InternalProcess.spawn(
        stats_source,
        spawner or SubprocessSpawner(),
        command,
        terminate_timeout=terminate_timeout,
        clock=clock,
        cores=cores,
    )

"""
Pytest fixtures for the procrec test suite.

Provides scripted stand-ins for the OS facing collaborators: a stats
source, a spawner with controllable children, and a clock / sleeper pair
that advances time only when the sampling loop sleeps.
"""
from __future__ import annotations

import logging
import subprocess
from typing import Callable, Dict, List, Optional

import matplotlib
import pytest

matplotlib.use("Agg")

from procrec.errors import ProcessAccessError, SpawnError, StatsUnavailableError  # noqa: E402
from procrec.service.stats_source.stats_source import MemoryFootprint, StatsHandle, StatsSource  # noqa: E402
from procrec.util.log_config import PACKAGE_LOGGER  # noqa: E402


class FakeClock:

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleeper:
    """Advances the clock on sleep and runs per-tick actions (1-based)."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls = 0
        self.actions: Dict[int, Callable[[], None]] = {}
        self.extra_work = 0.0

    def on_tick(self, tick: int, action: Callable[[], None]) -> None:
        self.actions[tick] = action

    def __call__(self, seconds: float) -> None:
        self.calls += 1
        self.clock.advance(seconds + self.extra_work)
        action = self.actions.get(self.calls)
        if action is not None:
            action()


class FakeStatsHandle(StatsHandle):

    def __init__(self, pid: int, cpu_times: Optional[List[float]] = None,
                 rss_kb: int = 2048, vsize_kb: int = 8192, threads: int = 3):
        super().__init__(pid)
        self.alive = True
        self.fail_stats = False
        self.cpu_times = list(cpu_times or [])
        self.cpu_time = 0.0
        self.rss_kb = rss_kb
        self.vsize_kb = vsize_kb
        self.threads = threads
        self.stat_calls = 0

    def _check(self) -> None:
        self.stat_calls += 1
        if self.fail_stats:
            raise StatsUnavailableError(self.pid, ProcessLookupError("gone"))

    def cpu_time_consumed(self) -> float:
        self._check()
        if self.cpu_times:
            self.cpu_time = self.cpu_times.pop(0)
        return self.cpu_time

    def memory_footprint(self) -> MemoryFootprint:
        self._check()
        return MemoryFootprint(resident_kb=self.rss_kb, virtual_kb=self.vsize_kb)

    def num_threads(self) -> int:
        self._check()
        return self.threads

    def is_alive(self) -> bool:
        return self.alive


class FakePercentStatsHandle(FakeStatsHandle):

    reports_cpu_percent = True

    def __init__(self, pid: int, percents: List[float]):
        super().__init__(pid)
        self.percents = list(percents)

    def cpu_percent(self) -> float:
        self._check()
        return self.percents.pop(0)


class FakeStatsSource(StatsSource):

    def __init__(self):
        self.handles: Dict[int, FakeStatsHandle] = {}
        self.auto_open = True
        self.opened: List[int] = []

    def add(self, handle: FakeStatsHandle) -> FakeStatsHandle:
        self.handles[handle.pid] = handle
        return handle

    def open(self, pid: int) -> StatsHandle:
        self.opened.append(pid)
        if pid not in self.handles:
            if not self.auto_open:
                raise ProcessAccessError(pid, ProcessLookupError("no such process"))
            self.handles[pid] = FakeStatsHandle(pid)
        return self.handles[pid]


class FakeChild:
    """Child whose exit is driven by the test."""

    def __init__(self, pid: int, command: List[str]):
        self.pid = pid
        self.command = command
        self.returncode: Optional[int] = None
        self.reaped = False
        self.ignore_terminate = False
        self.ignore_kill = False
        self.terminate_error: Optional[OSError] = None
        self.join_error: Optional[OSError] = None
        self.terminate_calls = 0
        self.kill_calls = 0
        self.join_calls = 0

    def exit(self, code: int = 0) -> None:
        self.returncode = code

    def try_join(self) -> Optional[int]:
        if self.returncode is not None:
            self.reaped = True
        return self.returncode

    def terminate(self) -> None:
        self.terminate_calls += 1
        if self.terminate_error is not None:
            raise self.terminate_error
        if not self.ignore_terminate:
            self.returncode = -15

    def kill(self) -> None:
        self.kill_calls += 1
        if not self.ignore_kill:
            self.returncode = -9

    def join(self, timeout: Optional[float] = None) -> int:
        self.join_calls += 1
        if self.join_error is not None:
            raise self.join_error
        if self.returncode is None:
            raise subprocess.TimeoutExpired(self.command, timeout)
        self.reaped = True
        return self.returncode


class FakeSpawner:

    def __init__(self, first_pid: int = 4000):
        self.next_pid = first_pid
        self.children: List[FakeChild] = []
        self.fail_with: Optional[OSError] = None

    def spawn(self, program: str, args=()) -> FakeChild:
        command = [program, *args]
        if self.fail_with is not None:
            raise SpawnError(command, self.fail_with)
        child = FakeChild(self.next_pid, command)
        self.next_pid += 1
        self.children.append(child)
        return child

    def live_children(self) -> List[FakeChild]:
        return [c for c in self.children if not c.reaped]


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so caplog sees package records."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper(clock: FakeClock) -> FakeSleeper:
    return FakeSleeper(clock)


@pytest.fixture
def stats_source() -> FakeStatsSource:
    return FakeStatsSource()


@pytest.fixture
def spawner() -> FakeSpawner:
    return FakeSpawner()

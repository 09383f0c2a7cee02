"""
Unit tests for the sampling loop.
Tests: stop conditions, timestamps, CPU percent sequence, failure policy.
"""
from __future__ import annotations

import pytest

from procrec.consts.MonitorState import MonitorState
from procrec.consts.StopReason import StopReason
from procrec.errors import SamplingError
from procrec.monitor.cancellation import CancellationFlag
from procrec.monitor.process_monitor import ProcessMonitor, monitor_process
from procrec.monitor.tracked_process import ExternalProcess, open_tracked_process
from tests.conftest import FakeStatsHandle


@pytest.fixture
def handle(stats_source):
    return stats_source.add(FakeStatsHandle(77))


@pytest.fixture
def external(stats_source, handle, clock):
    return ExternalProcess.attach(stats_source, 77, clock=clock)


def make_monitor(process, clock, sleeper, **kwargs) -> ProcessMonitor:
    kwargs.setdefault("interval", 1.0)
    return ProcessMonitor(process, sleep=sleeper, clock=clock, **kwargs)


class TestStopConditions:

    def test_duration_limit(self, external, clock, sleeper):
        monitor = make_monitor(external, clock, sleeper, duration=3.0)
        recording = monitor.run()

        timestamps = [s.ts for s in recording]
        assert timestamps == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0])
        # last sample is the first to exceed the limit
        assert timestamps[-1] > 3.0
        assert all(t <= 3.0 for t in timestamps[:-1])
        assert monitor.stop_reason == StopReason.DURATION_ELAPSED
        assert monitor.state == MonitorState.STOPPED

    def test_zero_duration_takes_one_sample_then_one_more(self, external, clock, sleeper):
        recording = make_monitor(external, clock, sleeper, duration=0.0).run()
        assert len(recording) == 2

    def test_recording_length_equals_elapsed_intervals(self, external, clock, sleeper):
        flag = CancellationFlag()
        sleeper.on_tick(6, flag.set)
        recording = make_monitor(external, clock, sleeper, cancel_flag=flag).run()
        assert len(recording) == 5
        assert sleeper.calls == 6
        assert recording[0].ts == 0.0
        timestamps = [s.ts for s in recording]
        assert timestamps == sorted(timestamps)

    @pytest.mark.parametrize("k", [0, 1, 4])
    def test_cancellation_between_ticks(self, external, clock, sleeper, k):
        flag = CancellationFlag()
        sleeper.on_tick(k + 1, flag.set)
        monitor = make_monitor(external, clock, sleeper, cancel_flag=flag)
        recording = monitor.run()
        assert len(recording) == k
        assert monitor.stop_reason == StopReason.CANCELLED

    def test_target_exit_detected_at_next_tick(self, external, handle, clock, sleeper):
        def die():
            handle.alive = False
        sleeper.on_tick(4, die)
        monitor = make_monitor(external, clock, sleeper)
        recording = monitor.run()
        assert len(recording) == 3
        assert monitor.stop_reason == StopReason.TARGET_EXITED

    def test_target_gone_before_first_tick(self, external, handle, clock, sleeper):
        handle.alive = False
        external.is_running()
        monitor = make_monitor(external, clock, sleeper)
        recording = monitor.run()
        assert len(recording) == 0
        assert sleeper.calls == 1
        assert monitor.stop_reason == StopReason.TARGET_EXITED

    def test_run_only_once(self, external, clock, sleeper):
        flag = CancellationFlag()
        flag.set()
        monitor = make_monitor(external, clock, sleeper, cancel_flag=flag)
        monitor.run()
        with pytest.raises(RuntimeError):
            monitor.run()


class TestSamples:

    def test_time_origin_is_first_sample_not_loop_start(self, external, clock, sleeper):
        recording = make_monitor(external, clock, sleeper, interval=2.5, duration=4.0).run()
        assert recording[0].ts == 0.0
        assert recording[1].ts == pytest.approx(2.5)

    def test_fixed_delay_is_not_drift_corrected(self, external, clock, sleeper):
        # every tick takes longer than the interval
        sleeper.extra_work = 0.25
        recording = make_monitor(external, clock, sleeper, duration=2.0).run()
        assert [s.ts for s in recording] == pytest.approx([0.0, 1.25, 2.5])

    def test_cpu_percent_sequence(self, stats_source, clock, sleeper):
        stats_source.add(FakeStatsHandle(5, cpu_times=[10.0, 10.5, 11.5, 11.75]))
        process = ExternalProcess.attach(stats_source, 5, clock=clock)
        recording = make_monitor(process, clock, sleeper, duration=1.5).run()
        assert [s.cpu for s in recording] == pytest.approx([50.0, 100.0, 25.0])

    def test_sample_fields(self, external, clock, sleeper):
        recording = make_monitor(external, clock, sleeper, duration=0.5).run()
        sample = recording[0]
        assert sample.pid == 77
        assert sample.rss == 2048
        assert sample.vsize == 8192
        assert sample.num_threads == 3

    def test_on_sample_sees_each_sample(self, external, clock, sleeper):
        seen = []
        recording = make_monitor(external, clock, sleeper, duration=2.0, on_sample=seen.append).run()
        assert seen == list(recording)

    def test_on_sample_failure_does_not_stop_loop(self, external, clock, sleeper):
        def broken(sample):
            raise IOError("stdout closed")
        recording = make_monitor(external, clock, sleeper, duration=2.0, on_sample=broken).run()
        assert len(recording) == 4


class TestFailurePolicy:

    def test_stats_failure_while_running_aborts_with_partial_recording(self, external, handle, clock, sleeper):
        def break_stats():
            handle.fail_stats = True
        sleeper.on_tick(3, break_stats)
        monitor = make_monitor(external, clock, sleeper)
        with pytest.raises(SamplingError) as exc_info:
            monitor.run()
        assert len(exc_info.value.recording) == 2
        assert exc_info.value.recording is monitor.recording
        assert monitor.stop_reason == StopReason.FAILED

    def test_baseline_failure_of_exited_target_is_not_an_error(self, external, handle, clock, sleeper):
        handle.fail_stats = True
        handle.alive = False
        recording = make_monitor(external, clock, sleeper).run()
        assert len(recording) == 0

    def test_baseline_failure_of_running_target_aborts(self, external, handle, clock, sleeper):
        handle.fail_stats = True
        with pytest.raises(SamplingError):
            make_monitor(external, clock, sleeper).run()
        assert sleeper.calls == 0


class TestSpawnedTarget:

    def open(self, stats_source, spawner, clock):
        return open_tracked_process(command=["job"], stats_source=stats_source, spawner=spawner,
                                    terminate_timeout=0.1, clock=clock)

    def test_cancelled_child_is_reaped(self, stats_source, spawner, clock, sleeper):
        process = self.open(stats_source, spawner, clock)
        flag = CancellationFlag()
        sleeper.on_tick(3, flag.set)
        with process:
            make_monitor(process, clock, sleeper, cancel_flag=flag).run()
        assert spawner.children[0].terminate_calls == 1
        assert spawner.live_children() == []

    def test_duration_expiry_child_is_reaped(self, stats_source, spawner, clock, sleeper):
        process = self.open(stats_source, spawner, clock)
        with process:
            make_monitor(process, clock, sleeper, duration=1.0).run()
        assert spawner.live_children() == []

    def test_self_exited_child_is_reaped_without_terminate(self, stats_source, spawner, clock, sleeper):
        process = self.open(stats_source, spawner, clock)
        child = spawner.children[0]
        sleeper.on_tick(3, lambda: child.exit(0))
        with process:
            recording = make_monitor(process, clock, sleeper).run()
        assert len(recording) == 2
        assert child.terminate_calls == 0
        assert spawner.live_children() == []

    def test_failed_run_still_reaps_child(self, stats_source, spawner, clock, sleeper):
        process = self.open(stats_source, spawner, clock)
        stats_source.handles[process.pid].fail_stats = True
        with pytest.raises(SamplingError):
            with process:
                make_monitor(process, clock, sleeper).run()
        assert spawner.live_children() == []


def test_monitor_process_closes_target(stats_source, spawner):
    process = open_tracked_process(command=["job"], stats_source=stats_source, spawner=spawner,
                                   terminate_timeout=0.1)
    flag = CancellationFlag()
    flag.set()
    recording = monitor_process(process, interval=0.01, cancel_flag=flag)
    assert len(recording) == 0
    assert process.closed
    assert spawner.live_children() == []

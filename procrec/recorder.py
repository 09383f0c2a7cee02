#!/usr/bin/env python3
"""
Record CPU and memory usage of one process.

Orchestrates a recording run:
1. Load configuration (YAML defaults, environment override, CLI flags)
2. Install the interrupt handler
3. Attach to the PID or spawn the command
4. Sample until cancelled, the target exits, or the duration elapses
5. Reap a spawned child and hand the recording to the reporters
"""
from typing import Optional, Tuple

from procrec.cli.cli import args_to_overrides, parse_recorder_args
from procrec.config.config_loader import DEFAULT_CONFIG_PATH, ConfigLoader
from procrec.config.recorder_config import RecorderConfig
from procrec.consts.ExitCode import ExitCode
from procrec.errors import (
    ConfigurationError,
    HandlerInstallError,
    ProcessAccessError,
    SamplingError,
    SpawnError,
)
from procrec.models.plot_params import PlotParams
from procrec.models.recording import Recording
from procrec.monitor.cancellation import CancellationFlag, install_interrupt_handler
from procrec.monitor.process_monitor import monitor_process
from procrec.monitor.tracked_process import TrackedProcess, open_tracked_process
from procrec.service.reporter.plot_reporter import PlotReporter
from procrec.service.reporter.text_reporter import TextReporter
from procrec.service.stats_source import build_stats_source
from procrec.util.log_config import configure_logging, get_logger

logger = get_logger(__name__)


def open_target(config: RecorderConfig) -> TrackedProcess:
    return open_tracked_process(
        pid=config.pid,
        command=config.command,
        stats_source=build_stats_source(config.cpu_mode),
        normalize_cores=config.normalize_cores,
        terminate_timeout=config.terminate_timeout,
    )


def record(
    config: RecorderConfig,
    process: TrackedProcess,
    cancel_flag: CancellationFlag,
    text: TextReporter,
) -> Tuple[Recording, ExitCode]:
    """
    Sample `process` and close it.

    Returns:
        The recording (possibly partial) and the exit code of the sampling stage
    """
    on_sample = text.report_sample if config.verbose > 0 else None
    logger.debug(str(config))
    try:
        recording = monitor_process(
            process,
            interval=config.interval,
            duration=config.duration,
            cancel_flag=cancel_flag,
            on_sample=on_sample,
        )
    except SamplingError as e:
        logger.error(str(e))
        return e.recording, ExitCode.SAMPLING_ABORTED
    logger.info(f"Recorded {len(recording)} sample(s) of PID {process.pid}")
    return recording, ExitCode.OK


def report(config: RecorderConfig, recording: Recording, text: TextReporter, title: str) -> ExitCode:
    """Hand the finished recording to the reporters. Failures are logged, never raised."""
    try:
        if config.verbose == 0:
            text.report_recording(recording)
        if config.summary:
            text.report_summary(recording.summary(config.interval))
        if config.csv_file:
            recording.save_csv(config.csv_file)
            logger.info(f"✓ Recording exported to: {config.csv_file.resolve()}")
        if config.graph or config.plot_file or config.data_file:
            if not recording:
                logger.warning("No samples recorded, skipping graph")
            else:
                params = PlotParams(title=title, output_path=config.plot_file, show=config.graph)
                PlotReporter(params, data_file=config.data_file).report(recording)
    except Exception as e:
        logger.error(f"Reporting failed: {e}")
        return ExitCode.REPORTING_FAILED
    return ExitCode.OK


def plot_title(config: RecorderConfig, process: Optional[TrackedProcess]) -> str:
    if config.command:
        return f"procrec: {' '.join(config.command)}"
    pid = process.pid if process is not None else config.pid
    return f"procrec: PID {pid}"


def main(argv=None) -> int:
    args = parse_recorder_args(argv)

    try:
        loader = ConfigLoader(args.config or DEFAULT_CONFIG_PATH, env=args.env)
        config = loader.build(args_to_overrides(args))
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Configuration error: {e}")
        return ExitCode.STARTUP_FAILED

    configure_logging(config.verbose, config.log_file)
    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")

    cancel_flag = CancellationFlag()
    try:
        handler = install_interrupt_handler(cancel_flag)
    except HandlerInstallError as e:
        logger.error(str(e))
        return ExitCode.STARTUP_FAILED

    text = TextReporter(table=config.table)
    try:
        try:
            process = open_target(config)
        except (ProcessAccessError, SpawnError) as e:
            logger.error(str(e))
            return ExitCode.STARTUP_FAILED
        recording, status = record(config, process, cancel_flag, text)
    finally:
        handler.restore()

    report_status = report(config, recording, text, plot_title(config, process))
    if status == ExitCode.OK:
        status = report_status
    return int(status)

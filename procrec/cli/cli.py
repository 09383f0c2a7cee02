#!/usr/bin/env python3
"""
Command-line interface of the recorder.
"""
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from procrec import __version__
from procrec.consts.CpuMode import CpuMode


def build_recorder_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="procrec",
        description="Record CPU utilization and memory consumption of a process.",
        epilog="Either attach with --pid or give a command to spawn, e.g. "
               "'procrec -i 1 -- make -j8'.",
    )
    ap.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    target = ap.add_argument_group("target")
    target.add_argument("-p", "--pid", type=int, default=None,
                        help="Process to be inspected")
    target.add_argument("command", nargs=argparse.REMAINDER,
                        help="Program (and arguments) to spawn and inspect")

    sampling = ap.add_argument_group("sampling")
    sampling.add_argument("-i", "--interval", type=float, default=None,
                          help="Sampling interval in seconds (default: 2)")
    sampling.add_argument("-d", "--duration", type=float, default=None,
                          help="Duration for observation in seconds")
    sampling.add_argument("--cpu-mode", choices=[m.value for m in CpuMode], default=None,
                          help="delta: derive CPU%% from consumed CPU time; "
                               "psutil: use psutil's cpu_percent (default: delta)")
    sampling.add_argument("--normalize-cores", action="store_true", default=None,
                          help="Divide CPU%% by the number of logical CPUs")
    sampling.add_argument("--terminate-timeout", type=float, default=None,
                          help="Seconds to wait for a spawned process after terminating it (default: 5)")

    output = ap.add_argument_group("output")
    output.add_argument("-v", "--verbose", action="count", default=None,
                        help="Print samples as they are taken; twice for debug logging")
    output.add_argument("-t", "--table", action="store_true", default=None,
                        help="Print the recording as a table")
    output.add_argument("-s", "--summary", action="store_true", default=None,
                        help="Print summary statistics")
    output.add_argument("-g", "--graph", action="store_true", default=None,
                        help="Display graph of the recording")
    output.add_argument("--plot-file", type=Path, default=None,
                        help="Save graph of the recording to this image file")
    output.add_argument("--data-file", type=Path, default=None,
                        help="Write sample lines to this file")
    output.add_argument("--csv", dest="csv_file", type=Path, default=None,
                        help="Write the recording as CSV to this file")
    output.add_argument("--log-file", type=Path, default=None,
                        help="Append detailed logs to this file")

    config = ap.add_argument_group("configuration")
    config.add_argument("--config", type=Path, default=None,
                        help="Directory containing config.yaml (default: bundled config)")
    config.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'fast'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    return ap


def _strip_separator(command: List[str]) -> Optional[List[str]]:
    if command and command[0] == "--":
        command = command[1:]
    return command or None


def parse_recorder_args(argv=None) -> argparse.Namespace:
    args = build_recorder_parser().parse_args(argv)
    args.command = _strip_separator(args.command)
    return args


def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed arguments onto RecorderConfig fields; unset flags are None."""
    return {
        "pid": args.pid,
        "command": args.command,
        "interval": args.interval,
        "duration": args.duration,
        "cpu_mode": args.cpu_mode,
        "normalize_cores": args.normalize_cores,
        "terminate_timeout": args.terminate_timeout,
        "verbose": args.verbose,
        "table": args.table,
        "summary": args.summary,
        "graph": args.graph,
        "plot_file": args.plot_file,
        "data_file": args.data_file,
        "csv_file": args.csv_file,
        "log_file": args.log_file,
    }

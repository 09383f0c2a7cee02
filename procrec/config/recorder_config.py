from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Optional

from procrec.consts.CpuMode import CpuMode
from procrec.errors import ConfigurationError

DEFAULT_INTERVAL = 2.0  # seconds
DEFAULT_TERMINATE_TIMEOUT = 5.0  # seconds

NUMBER_FIELDS = ("interval", "duration", "terminate_timeout")


@dataclass
class RecorderConfig:
    # Target: exactly one of pid / command
    pid: Optional[int] = None
    command: Optional[List[str]] = None

    # Sampling
    interval: float = DEFAULT_INTERVAL
    duration: Optional[float] = None
    cpu_mode: CpuMode = CpuMode.DELTA
    normalize_cores: bool = False
    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT

    # Output
    verbose: int = 0
    table: bool = False
    summary: bool = False
    graph: bool = False
    plot_file: Optional[Path] = None
    data_file: Optional[Path] = None
    csv_file: Optional[Path] = None
    log_file: Optional[Path] = None

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def _check_types(self) -> None:
        # YAML values arrive unchecked; bool is an int subclass and is rejected too
        if self.pid is not None and (isinstance(self.pid, bool) or not isinstance(self.pid, int)):
            raise ConfigurationError(f"PID must be an integer: {self.pid!r}")
        if self.command is not None and (
                not isinstance(self.command, list) or not all(isinstance(arg, str) for arg in self.command)):
            raise ConfigurationError(f"Command must be a list of strings: {self.command!r}")
        for name in NUMBER_FIELDS:
            value = getattr(self, name)
            if value is None and name == "duration":
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number: {value!r}")

    def validate(self) -> "RecorderConfig":
        """
        Check option types and combinations before any process is touched.

        Raises:
            ConfigurationError: on the first invalid option found
        """
        self._check_types()
        if self.pid is None and not self.command:
            if self.command is not None:
                raise ConfigurationError("Command must not be empty")
            raise ConfigurationError("Either a PID (--pid) or a command to spawn must be given")
        if self.pid is not None and self.command is not None:
            raise ConfigurationError("A PID and a command cannot both be given")
        if self.pid is not None and self.pid < 0:
            raise ConfigurationError(f"PID must not be negative: {self.pid}")
        if self.command is not None and not self.command[0]:
            raise ConfigurationError("Program name must not be empty")
        if self.interval <= 0:
            raise ConfigurationError(f"Interval must be positive: {self.interval}")
        if self.duration is not None and self.duration < 0:
            raise ConfigurationError(f"Duration must not be negative: {self.duration}")
        if self.terminate_timeout <= 0:
            raise ConfigurationError(f"Terminate timeout must be positive: {self.terminate_timeout}")
        return self

    def __str__(self):
        target = f"pid={self.pid}" if self.pid is not None else f"command={self.command}"
        return (f"RecorderConfig(\n"
                f"  {target},\n"
                f"  interval={self.interval},\n"
                f"  duration={self.duration},\n"
                f"  cpu_mode={self.cpu_mode.value},\n"
                f"  normalize_cores={self.normalize_cores},\n"
                f"  graph={self.graph},\n"
                f"  csv_file={self.csv_file}\n"
                f")")

"""
Configuration loader for procrec.

Loads recorder defaults from YAML files. Supports environment-specific
overrides via config_<env>.yaml, and command-line values on top of both.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from procrec.config.recorder_config import RecorderConfig
from procrec.consts.CpuMode import CpuMode
from procrec.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config_yaml"

PATH_FIELDS = ("plot_file", "data_file", "csv_file", "log_file")


class ConfigLoader:

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH, env: Optional[str] = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _load_config(self) -> Dict[str, Any]:
        """
        Load the base config.yaml and merge the environment override into it.

        Returns:
            Dict of raw config values
        """
        data = self._read_yaml(self.config_path / "config.yaml")

        if self.env:
            env_data = self._read_yaml(self.config_path / f"config_{self.env}.yaml")
            # dict.update() will overwrite existing keys
            data.update(env_data)

        unknown = sorted(set(data) - set(RecorderConfig.field_names()))
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        return data

    def build(self, overrides: Optional[Dict[str, Any]] = None) -> RecorderConfig:
        """
        Create a RecorderConfig from file values and command-line overrides.

        Args:
            overrides: Values that take precedence; None entries are ignored

        Returns:
            RecorderConfig: validated configuration
        """
        data = dict(self.config_data)
        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

        try:
            if "cpu_mode" in data:
                data["cpu_mode"] = CpuMode(data["cpu_mode"])
        except ValueError as e:
            raise ConfigurationError(f"Unsupported cpu_mode: {data['cpu_mode']}") from e

        for key in PATH_FIELDS:
            if data.get(key) is not None:
                data[key] = Path(data[key])

        try:
            config = RecorderConfig(**data)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e
        return config.validate()

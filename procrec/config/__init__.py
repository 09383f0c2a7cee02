"""Configuration module for the recorder."""

from .config_loader import ConfigLoader
from .recorder_config import RecorderConfig

__all__ = ["ConfigLoader", "RecorderConfig"]

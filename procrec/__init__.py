"""procrec - record CPU and memory usage of a process over time."""

__version__ = "0.3.0"

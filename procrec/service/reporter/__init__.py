from .plot_reporter import PlotReporter, write_data_file
from .text_reporter import TextReporter

__all__ = ["PlotReporter", "TextReporter", "write_data_file"]

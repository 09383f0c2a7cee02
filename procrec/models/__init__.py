"""Models for recorded data structures."""

from .plot_params import PlotParams
from .recording import Recording
from .recording_summary import RecordingSummary
from .sample import Sample

__all__ = ["PlotParams", "Recording", "RecordingSummary", "Sample"]

"""Data models for the AudioGuard package."""

from .audio import AudioMetrics, RecordingStatistics, QualityIssue, QualityReport
from .events import MetricsEvent

__all__ = [
    "AudioMetrics",
    "RecordingStatistics",
    "QualityIssue",
    "QualityReport",
    "MetricsEvent",
]

"""AudioGuard - real-time audio quality analysis and conditioning for dictation."""

from .audio import SampleBuffer, MetricsCalculator, AudioProcessor, calculate_metrics
from .config import (
    RecordingConstraints,
    DEFAULT_CONSTRAINTS,
    AudioQuality,
    QualityPreset,
    get_preset,
)
from .models import AudioMetrics, RecordingStatistics, QualityIssue, QualityReport
from .services.quality_monitor import QualityMonitor

__version__ = "0.1.0"

__all__ = [
    "SampleBuffer",
    "MetricsCalculator",
    "AudioProcessor",
    "calculate_metrics",
    "RecordingConstraints",
    "DEFAULT_CONSTRAINTS",
    "AudioQuality",
    "QualityPreset",
    "get_preset",
    "AudioMetrics",
    "RecordingStatistics",
    "QualityIssue",
    "QualityReport",
    "QualityMonitor",
]

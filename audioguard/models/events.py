"""Event models for publishing live audio metrics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .audio import AudioMetrics, RecordingStatistics


@dataclass
class MetricsEvent:
    """Per-buffer metrics with the session statistics at that point."""
    sequence_number: int
    metrics: AudioMetrics
    statistics: RecordingStatistics
    timestamp: datetime = field(default_factory=datetime.now)
    should_stop: bool = False
    source: Optional[str] = None  # e.g. input file name

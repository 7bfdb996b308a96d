"""Audio analysis and conditioning module."""

from .buffer import SampleBuffer
from .metrics import MetricsCalculator, calculate_metrics
from .processor import AudioProcessor
from .metrics_pub import MetricsPublisher

__all__ = [
    'SampleBuffer',
    'MetricsCalculator',
    'calculate_metrics',
    'AudioProcessor',
    'MetricsPublisher',
]

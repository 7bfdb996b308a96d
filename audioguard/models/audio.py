"""Audio quality data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass(frozen=True)
class AudioMetrics:
    """Quality snapshot of a single audio buffer."""
    rms_level: float         # Root mean square level (0.0 - 1.0)
    peak_level: float        # Peak amplitude (0.0 - 1.0)
    db_level: float          # RMS level in dBFS, -100 for silence
    is_clipping: bool
    is_silent: bool
    noise_floor: float       # Estimated noise floor in dBFS
    signal_to_noise: float   # db_level - noise_floor, in dB
    quality_score: int       # Overall quality score (0-100)

    @classmethod
    def empty(cls) -> "AudioMetrics":
        """Metrics of an empty buffer."""
        # Deferred: audio.metrics imports this module
        from ..audio.metrics import score_quality

        return cls(
            rms_level=0.0,
            peak_level=0.0,
            db_level=-100.0,
            is_clipping=False,
            is_silent=True,
            noise_floor=-100.0,
            signal_to_noise=0.0,
            quality_score=score_quality(rms=0.0, peak=0.0, snr=0.0, is_clipping=False, is_silent=True),
        )


@dataclass
class RecordingStatistics:
    """Running statistics of one recording session."""
    duration_seconds: float = 0.0      # Wall-clock time since monitoring started
    file_size: int = 0                 # Bytes of audio received so far
    clipping_occurrences: int = 0      # Number of clipping buffers
    silence_percentage: float = 0.0    # Share of samples in silent buffers (0-100)
    remaining_time_seconds: float = 0.0
    average_level: float = 0.0         # Mean RMS level of all buffers
    peak_level: float = 0.0            # Highest peak level seen
    overall_quality: int = 0
    total_buffers: int = 0
    silent_buffers: int = 0


class QualityIssue(Enum):
    """Problems detected over a recording session."""
    CLIPPING = "clipping"
    TOO_QUIET = "too_quiet"
    SILENCE_DETECTED = "silence_detected"
    TOO_MUCH_SILENCE = "too_much_silence"
    HIGH_NOISE = "high_noise"
    POOR_QUALITY = "poor_quality"


@dataclass
class QualityReport:
    """Summary of a finished recording session."""
    overall_quality: int
    audio_metrics: AudioMetrics
    recording_statistics: RecordingStatistics
    issues: List[QualityIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

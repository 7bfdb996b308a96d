"""Recording session quality monitor.

The capture thread pushes every buffer through :meth:`QualityMonitor.process_audio_buffer`
while UI or reporting threads poll statistics and the stop decision.  All
session state lives in one :class:`_SessionState` object guarded by a single
lock; metrics are computed before the lock is taken so readers only ever
wait for the aggregate update itself.
"""

import time
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional

from ..audio.buffer import as_samples, sample_rate_of, BYTES_PER_SAMPLE
from ..audio.metrics import MetricsCalculator
from ..config.constraints import DEFAULT_CONSTRAINTS, RecordingConstraints
from ..config.presets import MEDIUM, QualityPreset
from ..models.audio import AudioMetrics, QualityIssue, QualityReport, RecordingStatistics

logger = logging.getLogger(__name__)

TOO_QUIET_LEVEL = 0.05            # average RMS below this is too quiet
TOO_MUCH_SILENCE_PERCENT = 50.0
HIGH_NOISE_FLOOR_DB = -30.0
HIGH_NOISE_FLATNESS = 0.5        # mean spectral flatness of audible buffers
POOR_QUALITY_SCORE = 30

# Optional silence-based stop
SILENCE_STOP_MIN_DURATION_SECONDS = 10.0
SILENCE_STOP_PERCENT = 80.0

# Rate estimates below this much elapsed time are unreliable
MIN_RATE_ESTIMATE_SECONDS = 0.1

RECOMMENDATIONS = {
    QualityIssue.CLIPPING: "Reduce microphone gain or move further from the microphone",
    QualityIssue.TOO_QUIET: "Increase microphone gain or speak closer to the microphone",
    QualityIssue.TOO_MUCH_SILENCE: "Start speaking when ready, silence will be automatically trimmed",
    QualityIssue.SILENCE_DETECTED: "Pauses were detected; leading and trailing silence can be trimmed before upload",
    QualityIssue.HIGH_NOISE: "Record in a quieter environment or use a better microphone",
    QualityIssue.POOR_QUALITY: "Check the microphone and recording environment before the next session",
}


@dataclass
class _SessionState:
    """Mutable aggregates of one monitoring session."""
    start_time: float
    statistics: RecordingStatistics = field(default_factory=RecordingStatistics)
    current_metrics: AudioMetrics = field(default_factory=AudioMetrics.empty)
    total_samples: int = 0
    silent_samples: int = 0
    rms_sum: float = 0.0
    db_sum: float = 0.0
    snr_sum: float = 0.0
    quality_sum: int = 0
    noise_floor_sum: float = 0.0   # non-silent buffers only
    flatness_sum: float = 0.0
    audible_buffers: int = 0
    stop_logged: bool = False


class QualityMonitor:
    """Tracks quality and size of a single recording session."""

    def __init__(
        self,
        quality_preset: QualityPreset = MEDIUM,
        constraints: RecordingConstraints = DEFAULT_CONSTRAINTS,
        stop_on_excessive_silence: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize quality monitor.

        Args:
            quality_preset: Preset of the session being monitored
            constraints: Recording constraints (size cap, thresholds)
            stop_on_excessive_silence: Also stop long recordings that are mostly silence
            clock: Monotonic time source in seconds
        """
        self.quality_preset = quality_preset
        self.constraints = constraints
        self.stop_on_excessive_silence = stop_on_excessive_silence
        self.clock = clock
        self.calculator = MetricsCalculator(constraints)

        self.lock = threading.Lock()
        self._state: Optional[_SessionState] = None
        self.is_monitoring = False

    def start_monitoring(self) -> None:
        """Start a new session, discarding any previous statistics."""
        with self.lock:
            if self.is_monitoring:
                logger.warning("Monitoring already in progress, resetting session")
            self._state = _SessionState(start_time=self.clock())
            self._state.statistics.remaining_time_seconds = self.constraints.max_recording_duration_seconds
            self.is_monitoring = True
        logger.info(f"Quality monitoring started ({self.quality_preset.quality.name} preset, "
                    f"cap {self.constraints.max_file_size_bytes} bytes)")

    def process_audio_buffer(self, buffer: Any) -> AudioMetrics:
        """Compute metrics for ``buffer`` and fold them into the session.

        Args:
            buffer: SampleBuffer or int16 array-like from the capture thread

        Returns:
            Metrics of this buffer for live display
        """
        samples = as_samples(buffer)
        metrics = self.calculator.calculate(samples, sample_rate=sample_rate_of(buffer))
        flatness = 0.0 if metrics.is_silent else self.calculator.spectral_flatness(samples)

        if not self.is_monitoring:
            logger.warning("Audio buffer received while idle, starting monitoring")
            self.start_monitoring()

        with self.lock:
            state = self._state
            now = self.clock()
            if samples.size:
                self._accumulate(state, samples.size, metrics, flatness)
            self._update_statistics(state, now)
            stats = state.statistics
            buffer_index = stats.total_buffers

            if not state.stop_logged and stats.file_size >= self.constraints.max_file_size_bytes:
                state.stop_logged = True
                logger.warning(f"File size limit reached: {stats.file_size} bytes "
                               f"(cap {self.constraints.max_file_size_bytes})")

        logger.debug(f"Buffer {buffer_index}: rms={metrics.rms_level:.4f} "
                     f"peak={metrics.peak_level:.4f} score={metrics.quality_score}")
        return metrics

    def _accumulate(self, state: _SessionState, sample_count: int, metrics: AudioMetrics,
                    flatness: float) -> None:
        stats = state.statistics
        stats.total_buffers += 1
        stats.file_size += sample_count * BYTES_PER_SAMPLE
        state.total_samples += sample_count

        if metrics.is_silent:
            stats.silent_buffers += 1
            state.silent_samples += sample_count
        else:
            state.noise_floor_sum += metrics.noise_floor
            state.flatness_sum += flatness
            state.audible_buffers += 1
        if metrics.is_clipping:
            stats.clipping_occurrences += 1
        if metrics.peak_level > stats.peak_level:
            stats.peak_level = metrics.peak_level

        state.rms_sum += metrics.rms_level
        state.db_sum += metrics.db_level
        state.snr_sum += metrics.signal_to_noise
        state.quality_sum += metrics.quality_score
        state.current_metrics = metrics

    def _update_statistics(self, state: _SessionState, now: float) -> None:
        stats = state.statistics
        stats.duration_seconds = max(now - state.start_time, 0.0)

        if state.total_samples:
            stats.silence_percentage = state.silent_samples * 100.0 / state.total_samples
        if stats.total_buffers:
            stats.average_level = state.rms_sum / stats.total_buffers
            stats.overall_quality = int(round(state.quality_sum / stats.total_buffers))

        remaining_bytes = max(self.constraints.max_file_size_bytes - stats.file_size, 0)
        stats.remaining_time_seconds = remaining_bytes / self._byte_rate(state)

    def _byte_rate(self, state: _SessionState) -> float:
        """Observed bytes per second, or the nominal rate early in a session."""
        stats = state.statistics
        if stats.duration_seconds > MIN_RATE_ESTIMATE_SECONDS and stats.file_size:
            return stats.file_size / stats.duration_seconds
        return float(self.constraints.bytes_per_second)

    def should_stop_recording(self) -> bool:
        """True once the session has reached the file size cap."""
        with self.lock:
            if self._state is None:
                return False
            stats = self._state.statistics
            if stats.file_size >= self.constraints.max_file_size_bytes:
                return True

            if (self.stop_on_excessive_silence
                    and self.quality_preset.silence_trimming
                    and stats.duration_seconds > SILENCE_STOP_MIN_DURATION_SECONDS
                    and stats.silence_percentage > SILENCE_STOP_PERCENT):
                return True
        return False

    def can_continue_recording(self, additional_seconds: float) -> bool:
        """Whether ``additional_seconds`` more audio still fits under the cap."""
        additional_bytes = additional_seconds * self.constraints.bytes_per_second
        with self.lock:
            file_size = self._state.statistics.file_size if self._state else 0
        return file_size + additional_bytes < self.constraints.max_file_size_bytes

    def get_remaining_recording_time(self) -> float:
        """Seconds of recording left before the file size cap."""
        with self.lock:
            if self._state is None:
                return self.constraints.max_recording_duration_seconds
            return self._state.statistics.remaining_time_seconds

    def get_recording_statistics(self) -> RecordingStatistics:
        """Snapshot of the current session statistics."""
        with self.lock:
            if self._state is None:
                return RecordingStatistics()
            return replace(self._state.statistics)

    def get_current_metrics(self) -> AudioMetrics:
        """Metrics of the most recent non-empty buffer."""
        with self.lock:
            if self._state is None:
                return AudioMetrics.empty()
            return self._state.current_metrics

    def get_quality_report(self) -> QualityReport:
        """Summarise the whole session and return to idle."""
        with self.lock:
            state = self._state
            if state is None:
                statistics = RecordingStatistics()
                averaged = AudioMetrics.empty()
                overall = 0
                issues: List[QualityIssue] = []
            else:
                statistics = replace(state.statistics)
                averaged = self._average_metrics(state)
                overall = averaged.quality_score if statistics.total_buffers else 0
                issues = self._detect_issues(state, overall)
            self.is_monitoring = False

        recommendations = [RECOMMENDATIONS[issue] for issue in issues]
        logger.info(f"Quality report: score {overall}, "
                    f"issues: {[issue.value for issue in issues] or 'none'}")
        return QualityReport(
            overall_quality=overall,
            audio_metrics=averaged,
            recording_statistics=statistics,
            issues=issues,
            recommendations=recommendations,
        )

    def _average_metrics(self, state: _SessionState) -> AudioMetrics:
        stats = state.statistics
        count = stats.total_buffers
        if not count:
            return AudioMetrics.empty()

        noise_floor = (state.noise_floor_sum / state.audible_buffers
                       if state.audible_buffers else -100.0)
        return AudioMetrics(
            rms_level=state.rms_sum / count,
            peak_level=stats.peak_level,
            db_level=state.db_sum / count,
            is_clipping=stats.clipping_occurrences > 0,
            is_silent=stats.silent_buffers == count,
            noise_floor=noise_floor,
            signal_to_noise=state.snr_sum / count,
            quality_score=int(round(state.quality_sum / count)),
        )

    def _detect_issues(self, state: _SessionState, overall: int) -> List[QualityIssue]:
        stats = state.statistics
        issues = []
        if not stats.total_buffers:
            return issues

        if stats.clipping_occurrences > 0:
            issues.append(QualityIssue.CLIPPING)
        if stats.average_level < TOO_QUIET_LEVEL:
            issues.append(QualityIssue.TOO_QUIET)
        if stats.silence_percentage > TOO_MUCH_SILENCE_PERCENT:
            issues.append(QualityIssue.TOO_MUCH_SILENCE)
        elif stats.silent_buffers > 0:
            issues.append(QualityIssue.SILENCE_DETECTED)
        if state.audible_buffers and self._is_noisy(state):
            issues.append(QualityIssue.HIGH_NOISE)
        if overall < POOR_QUALITY_SCORE:
            issues.append(QualityIssue.POOR_QUALITY)
        return issues

    def _is_noisy(self, state: _SessionState) -> bool:
        """Loud background that is also broadband, as opposed to a steady voice."""
        floor = state.noise_floor_sum / state.audible_buffers
        flatness = state.flatness_sum / state.audible_buffers
        return floor > HIGH_NOISE_FLOOR_DB and flatness > HIGH_NOISE_FLATNESS

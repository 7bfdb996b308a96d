"""Per-buffer audio quality metrics.

:class:`MetricsCalculator` turns one buffer of PCM16 samples into an
:class:`~audioguard.models.audio.AudioMetrics` snapshot.  It keeps no state
and performs no I/O, so a single instance can be shared between the capture
thread and any reporting thread.

The noise floor is taken from a sliding-window RMS envelope: the 10th
percentile of the envelope approximates the quietest stretches of the buffer,
which is where only background noise remains.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import numpy as np
from scipy.ndimage import uniform_filter1d
from scipy.signal import welch

from ..config.constraints import (
    DEFAULT_CONSTRAINTS,
    FULL_SCALE,
    SILENCE_DB,
    RecordingConstraints,
)
from ..models.audio import AudioMetrics
from .buffer import as_samples, sample_rate_of

logger = logging.getLogger(__name__)

# Envelope window used for the noise floor estimate.
NOISE_FLOOR_WINDOW_MS: float = 10.0

# Percentile of the envelope treated as background level.
NOISE_FLOOR_PERCENTILE: float = 10.0

# Segment length for the Welch spectrum behind spectral flatness.
FLATNESS_SEGMENT: int = 256

# ─── Quality score weights ─────────────────────────────────────────────────

BASE_SCORE: float = 50.0
SILENCE_PENALTY: float = 20.0
SNR_WEIGHT: float = 0.75          # points per dB of signal-to-noise
SNR_CAP_DB: float = 40.0
OPTIMAL_RMS_RANGE = (0.1, 0.5)
OPTIMAL_RMS_BONUS: float = 20.0
LOW_RMS_LEVEL: float = 0.05
LOW_RMS_PENALTY: float = 10.0
HEADROOM_PEAK: float = 0.9
HEADROOM_BONUS: float = 10.0
CLIPPING_PENALTY: float = 30.0
CLIPPING_SCORE_CAP: float = 45.0


def to_db(level: float) -> float:
    """Convert a linear level (fraction of full scale) to dBFS."""
    if level <= 0.0:
        return SILENCE_DB
    return max(20.0 * math.log10(level), SILENCE_DB)


def score_quality(rms: float, peak: float, snr: float, is_clipping: bool, is_silent: bool) -> int:
    """Composite 0-100 quality score.

    Clipping subtracts a fixed penalty and caps the result below the
    midpoint; otherwise the score grows with signal-to-noise and rewards a
    comfortable speaking level with headroom.
    """
    score = BASE_SCORE

    if is_silent:
        score -= SILENCE_PENALTY

    score += min(max(snr, 0.0), SNR_CAP_DB) * SNR_WEIGHT

    low, high = OPTIMAL_RMS_RANGE
    if low <= rms <= high:
        score += OPTIMAL_RMS_BONUS
    elif rms < LOW_RMS_LEVEL:
        score -= LOW_RMS_PENALTY

    if peak < HEADROOM_PEAK:
        score += HEADROOM_BONUS

    if is_clipping:
        score = min(score - CLIPPING_PENALTY, CLIPPING_SCORE_CAP)

    return int(round(min(max(score, 0.0), 100.0)))


class MetricsCalculator:
    """Computes :class:`AudioMetrics` for PCM16 buffers."""

    def __init__(self, constraints: RecordingConstraints = DEFAULT_CONSTRAINTS):
        """Initialize calculator.

        Args:
            constraints: Thresholds for clipping and silence classification
        """
        self.constraints = constraints

    def calculate(self, buffer: Any, sample_rate: Optional[int] = None) -> AudioMetrics:
        """Compute metrics for ``buffer`` (SampleBuffer or int16 array-like).

        ``sample_rate`` overrides the rate of a plain array.
        """
        samples = as_samples(buffer)
        if samples.size == 0:
            return AudioMetrics.empty()

        values = samples.astype(np.float64)
        sum_squares = float(np.dot(values, values))
        peak_abs = float(np.max(np.abs(values)))

        rms = math.sqrt(sum_squares / samples.size) / FULL_SCALE
        peak = peak_abs / FULL_SCALE
        db_level = to_db(rms)

        is_silent = rms < self.constraints.silence_threshold
        is_clipping = peak >= self.constraints.clipping_threshold

        noise_floor = min(self.estimate_noise_floor(samples, sample_rate or sample_rate_of(buffer)), db_level)
        snr = db_level - noise_floor

        return AudioMetrics(
            rms_level=rms,
            peak_level=peak,
            db_level=db_level,
            is_clipping=is_clipping,
            is_silent=is_silent,
            noise_floor=noise_floor,
            signal_to_noise=snr,
            quality_score=score_quality(
                rms=rms,
                peak=peak,
                snr=snr,
                is_clipping=is_clipping,
                is_silent=is_silent,
            ),
        )

    def rms(self, samples: np.ndarray) -> float:
        """RMS level of ``samples`` as a fraction of full scale."""
        if samples.size == 0:
            return 0.0
        values = samples.astype(np.float64)
        return math.sqrt(float(np.dot(values, values)) / samples.size) / FULL_SCALE

    def is_silent(self, samples: np.ndarray) -> bool:
        """Silence rule shared with trimming: RMS below the silence threshold."""
        return self.rms(samples) < self.constraints.silence_threshold

    def envelope(self, samples: np.ndarray, window: int) -> np.ndarray:
        """Sliding-window RMS envelope, normalised to full scale."""
        values = samples.astype(np.float64) / FULL_SCALE
        window = max(1, min(int(window), values.size))
        mean_square = uniform_filter1d(values * values, size=window, mode="nearest")
        return np.sqrt(np.maximum(mean_square, 0.0))

    def estimate_noise_floor(self, samples: np.ndarray, sample_rate: Optional[int] = None) -> float:
        """Estimate the noise floor of ``samples`` in dBFS."""
        if samples.size == 0:
            return SILENCE_DB
        rate = sample_rate or self.constraints.sample_rate
        window = int(rate * NOISE_FLOOR_WINDOW_MS / 1000)
        envelope = self.envelope(samples, window)
        return to_db(float(np.percentile(envelope, NOISE_FLOOR_PERCENTILE)))

    def spectral_flatness(self, samples: np.ndarray) -> float:
        """Wiener entropy of the power spectrum, 0 (tonal) to 1 (white noise).

        Steady tones and broadband hiss both hold their envelope floor near
        the signal level; only hiss has a flat spectrum.
        """
        if samples.size < 2:
            return 0.0
        values = samples.astype(np.float64) / FULL_SCALE
        _, psd = welch(values, nperseg=min(FLATNESS_SEGMENT, values.size))
        psd = psd[1:] + 1e-20  # skip DC
        return float(np.exp(np.mean(np.log(psd))) / np.mean(psd))


_default_calculator = MetricsCalculator()


def calculate_metrics(buffer: Any) -> AudioMetrics:
    """Compute metrics with the default recording constraints."""
    return _default_calculator.calculate(buffer)


__all__ = ["MetricsCalculator", "calculate_metrics", "score_quality", "to_db"]

"""Post-capture conditioning of recorded audio.

:class:`AudioProcessor` runs the finished waveform through a fixed-order
pipeline before it is handed to the file writer:

1. silence trimming (leading and trailing silent windows only)
2. an adaptive, ramped noise gate
3. peak normalisation

Each stage is enabled by the session's :class:`QualityPreset`.  Input buffers
are never modified and the output is never longer than the input.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import numpy as np
from scipy.ndimage import uniform_filter1d
from scipy.signal import lfilter

from ..config.constraints import (
    DEFAULT_CONSTRAINTS,
    FULL_SCALE,
    SILENCE_DB,
    RecordingConstraints,
)
from ..config.presets import MEDIUM, QualityPreset
from .buffer import INT16_MAX, INT16_MIN, as_samples, sample_rate_of, wrap_like
from .metrics import MetricsCalculator, to_db

logger = logging.getLogger(__name__)

# ─── Silence trimming ─────────────────────────────────────────────────────

TRIM_WINDOW_MS: float = 10.0

# ─── Noise gate ───────────────────────────────────────────────────────────

NOISE_GATE_WINDOW_MS: float = 6.25      # 100 samples at 16 kHz
NOISE_GATE_MARGIN: float = 2.0          # threshold = noise floor * margin
NOISE_GATE_MIN_THRESHOLD: float = 0.005
NOISE_GATE_ATTENUATION: float = 0.1     # gain applied to gated audio
NOISE_GATE_KNEE: float = 0.5            # gate fully closed below knee * threshold
NOISE_GATE_RAMP_MS: float = 4.0

# ─── Normalisation ───────────────────────────────────────────────────────

NORMALIZATION_TARGET: float = 0.9       # fraction of INT16_MAX


def _window_samples(sample_rate: int, window_ms: float) -> int:
    return max(1, int(sample_rate * window_ms / 1000))


class AudioProcessor:
    """Applies the preset-gated trimming, gating and normalisation pipeline."""

    def __init__(
        self,
        quality_preset: QualityPreset = MEDIUM,
        constraints: RecordingConstraints = DEFAULT_CONSTRAINTS,
    ):
        """Initialize audio processor.

        Args:
            quality_preset: Default preset used by process_audio
            constraints: Recording constraints (silence threshold, sample rate)
        """
        self.quality_preset = quality_preset
        self.constraints = constraints
        self.metrics = MetricsCalculator(constraints)

    def process_audio(self, buffer: Any, preset: Optional[QualityPreset] = None) -> Any:
        """Run ``buffer`` through the pipeline stages enabled by ``preset``.

        Args:
            buffer: SampleBuffer or int16 array-like
            preset: Preset to apply, defaults to the processor's preset

        Returns:
            Processed audio of the same container type as ``buffer``
        """
        preset = preset or self.quality_preset
        original = as_samples(buffer)
        sample_rate = sample_rate_of(buffer, self.constraints.sample_rate)
        processed = original

        if preset.silence_trimming:
            processed = self._trim_silence(processed, sample_rate)

        if preset.noise_reduction:
            processed = self._apply_noise_gate(processed, sample_rate)

        if preset.normalization:
            processed = self._normalize(processed)

        if processed.size and np.shares_memory(processed, original):
            processed = processed.copy()

        logger.debug(f"Processed audio with {preset.quality.name} preset: "
                     f"{original.size} -> {processed.size} samples")
        return wrap_like(buffer, processed)

    def trim_silence(self, buffer: Any) -> Any:
        """Remove silent windows from both ends of ``buffer``."""
        samples = as_samples(buffer)
        trimmed = self._trim_silence(samples, sample_rate_of(buffer, self.constraints.sample_rate))
        return wrap_like(buffer, trimmed.copy())

    def apply_noise_gate(self, buffer: Any) -> Any:
        """Attenuate low-energy stretches of ``buffer`` below the adaptive gate."""
        samples = as_samples(buffer)
        gated = self._apply_noise_gate(samples, sample_rate_of(buffer, self.constraints.sample_rate))
        return wrap_like(buffer, gated)

    def normalize(self, buffer: Any) -> Any:
        """Scale ``buffer`` so its peak sits at the normalisation target."""
        samples = as_samples(buffer)
        normalized = self._normalize(samples)
        if normalized is samples:
            normalized = samples.copy()
        return wrap_like(buffer, normalized)

    def detect_noise_level(self, buffer: Any) -> float:
        """Estimated noise floor of ``buffer`` in dBFS."""
        samples = as_samples(buffer)
        return self.metrics.estimate_noise_floor(samples, sample_rate_of(buffer, self.constraints.sample_rate))

    def calculate_dynamic_range(self, buffer: Any) -> float:
        """Spread in dB between the 90th and 10th percentile of non-zero magnitudes."""
        samples = as_samples(buffer)
        magnitudes = np.abs(samples.astype(np.float64))
        magnitudes = magnitudes[magnitudes > 0]
        if magnitudes.size == 0:
            return 0.0

        low, high = np.percentile(magnitudes, [10, 90])
        if low <= 0 or high <= 0:
            return 0.0
        return 20.0 * math.log10(high / low)

    def apply_high_pass_filter(self, buffer: Any, cutoff_frequency: float = 80.0) -> Any:
        """One-pole RC high-pass filter removing rumble below ``cutoff_frequency`` Hz."""
        if cutoff_frequency <= 0:
            raise ValueError(f"cutoff_frequency must be positive, got {cutoff_frequency}")
        samples = as_samples(buffer)
        if samples.size == 0:
            return wrap_like(buffer, samples.copy())

        sample_rate = sample_rate_of(buffer, self.constraints.sample_rate)
        rc = 1.0 / (2.0 * math.pi * cutoff_frequency)
        dt = 1.0 / sample_rate
        alpha = rc / (rc + dt)

        filtered = lfilter([alpha, -alpha], [1.0, -alpha], samples.astype(np.float64))
        return wrap_like(buffer, _to_pcm(filtered))

    # ─── Pipeline stages ─────────────────────────────────────────────────

    def _trim_silence(self, samples: np.ndarray, sample_rate: int) -> np.ndarray:
        if samples.size == 0:
            return samples

        window = _window_samples(sample_rate, TRIM_WINDOW_MS)
        total = samples.size

        start = 0
        while start < total and self.metrics.is_silent(samples[start:start + window]):
            start += window
        if start >= total:
            logger.debug("Audio is silent throughout, trimmed to empty")
            return samples[:0]

        # Trailing windows are anchored at the end so a second pass sees the same windows
        end = total
        while end - start > window and self.metrics.is_silent(samples[end - window:end]):
            end -= window

        if start or end < total:
            logger.debug(f"Trimmed silence: {start} leading, {total - end} trailing samples")
        return samples[start:end]

    def _apply_noise_gate(self, samples: np.ndarray, sample_rate: int) -> np.ndarray:
        if samples.size == 0:
            return samples.copy()

        floor_db = self.metrics.estimate_noise_floor(samples, sample_rate)
        floor = 0.0 if floor_db <= SILENCE_DB else 10.0 ** (floor_db / 20.0)
        threshold = min(max(floor * NOISE_GATE_MARGIN, NOISE_GATE_MIN_THRESHOLD),
                        self.constraints.silence_threshold)

        envelope = self.metrics.envelope(samples, _window_samples(sample_rate, NOISE_GATE_WINDOW_MS))

        # Soft knee: attenuation below knee * threshold, unity at threshold
        closed = threshold * NOISE_GATE_KNEE
        position = np.clip((envelope - closed) / (threshold - closed), 0.0, 1.0)
        gain = NOISE_GATE_ATTENUATION + (1.0 - NOISE_GATE_ATTENUATION) * position

        ramp = min(_window_samples(sample_rate, NOISE_GATE_RAMP_MS), samples.size)
        gain = np.clip(uniform_filter1d(gain, size=ramp, mode="nearest"), 0.0, 1.0)

        logger.debug(f"Noise gate: floor {floor_db:.1f} dBFS, threshold {to_db(threshold):.1f} dBFS, "
                     f"{np.count_nonzero(gain < 1.0)} samples attenuated")
        return _to_pcm(samples.astype(np.float64) * gain)

    def _normalize(self, samples: np.ndarray) -> np.ndarray:
        if samples.size == 0 or self.metrics.is_silent(samples):
            return samples

        peak = int(np.max(np.abs(samples.astype(np.int32))))
        target = INT16_MAX * NORMALIZATION_TARGET
        factor = target / peak
        logger.debug(f"Normalizing peak {peak / FULL_SCALE:.3f} with factor {factor:.3f}")
        return _to_pcm(samples.astype(np.float64) * factor)


def _to_pcm(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), INT16_MIN, INT16_MAX).astype(np.int16)


__all__ = ["AudioProcessor", "NORMALIZATION_TARGET", "TRIM_WINDOW_MS"]

"""Unit tests for MetricsCalculator."""

import pytest
import numpy as np

from audioguard.audio.buffer import SampleBuffer
from audioguard.audio.metrics import MetricsCalculator, calculate_metrics, score_quality, to_db
from audioguard.config.constraints import CLIPPING_THRESHOLD, SILENCE_THRESHOLD, RecordingConstraints
from audioguard.models.audio import AudioMetrics


@pytest.mark.unit
class TestMetricsCalculator:
    """Test cases for MetricsCalculator."""

    def test_empty_buffer(self):
        """Empty input yields zero levels, silence and -100 dB."""
        for empty in (np.array([], dtype=np.int16), SampleBuffer(np.array([], dtype=np.int16)), []):
            metrics = calculate_metrics(empty)

            assert metrics.rms_level == 0.0
            assert metrics.peak_level == 0.0
            assert metrics.db_level == -100.0
            assert metrics.is_clipping is False
            assert metrics.is_silent is True
            assert 0 <= metrics.quality_score <= 100

    def test_empty_matches_empty_metrics(self):
        assert calculate_metrics([]) == AudioMetrics.empty()

    @pytest.mark.parametrize("length", [1, 160, 1600, 16000])
    def test_all_zero_buffer_is_silent(self, length):
        metrics = calculate_metrics(np.zeros(length, dtype=np.int16))

        assert metrics.is_silent is True
        assert metrics.rms_level == 0.0
        assert metrics.db_level == -100.0
        assert metrics.quality_score >= 0

    def test_quiet_sine(self, make_sine):
        """A 100/32768 amplitude tone is quiet but measurable."""
        metrics = calculate_metrics(make_sine(100, 1600))

        assert metrics.rms_level < 0.01
        assert metrics.db_level < -30
        assert metrics.is_silent is True
        assert metrics.is_clipping is False

    def test_periodic_full_scale_samples_clip(self, clipping_buffer):
        metrics = calculate_metrics(clipping_buffer)

        assert metrics.is_clipping is True
        assert metrics.peak_level >= CLIPPING_THRESHOLD
        assert metrics.quality_score < 50

    def test_normal_speech_level(self, speech_buffer):
        metrics = calculate_metrics(speech_buffer)

        assert metrics.is_silent is False
        assert metrics.is_clipping is False
        assert metrics.rms_level == pytest.approx(8000 / np.sqrt(2) / 32768, rel=0.01)
        assert metrics.peak_level == pytest.approx(8000 / 32768, rel=0.01)
        assert metrics.db_level == pytest.approx(20 * np.log10(metrics.rms_level))
        assert metrics.quality_score >= 70

    def test_negative_full_scale_peak(self):
        metrics = calculate_metrics(np.array([-32768, 0, 0, 0], dtype=np.int16))
        assert metrics.peak_level == 1.0
        assert metrics.is_clipping is True

    def test_noise_floor_below_level(self):
        """Noise floor never exceeds the buffer level for audible buffers."""
        rng = np.random.default_rng(42)
        for scale in (500, 3000, 12000):
            samples = rng.normal(scale=scale, size=1600).clip(-32768, 32767).astype(np.int16)
            metrics = calculate_metrics(samples)

            assert metrics.is_silent is False
            assert metrics.noise_floor <= metrics.db_level
            assert metrics.signal_to_noise >= 0

    def test_signal_above_its_floor_has_positive_snr(self, make_sine):
        samples = np.concatenate([make_sine(50, 800), make_sine(8000, 800)])
        metrics = calculate_metrics(samples)

        assert metrics.signal_to_noise > 20
        assert metrics.noise_floor < -40

    def test_deterministic(self, speech_buffer):
        calculator = MetricsCalculator()
        assert calculator.calculate(speech_buffer) == calculator.calculate(speech_buffer)

    def test_custom_thresholds(self, make_sine):
        calculator = MetricsCalculator(RecordingConstraints(clipping_threshold=0.2, silence_threshold=0.1))
        metrics = calculator.calculate(make_sine(8000, 1600))

        assert metrics.is_clipping is True
        assert metrics.is_silent is False

    def test_silence_rule_helpers(self, make_sine):
        calculator = MetricsCalculator()

        assert calculator.is_silent(np.zeros(160, dtype=np.int16))
        assert calculator.is_silent(make_sine(100, 160))
        assert not calculator.is_silent(make_sine(1000, 160))
        assert calculator.rms(np.array([], dtype=np.int16)) == 0.0

    def test_none_buffer_rejected(self):
        with pytest.raises(ValueError):
            calculate_metrics(None)

    def test_spectral_flatness_separates_tone_from_hiss(self, make_sine):
        calculator = MetricsCalculator()
        hiss = np.random.default_rng(7).normal(0.0, 6500.0, 1600).astype(np.int16)

        assert calculator.spectral_flatness(make_sine(8000, 1600)) < 0.1
        assert calculator.spectral_flatness(hiss) > 0.5
        assert calculator.spectral_flatness(np.array([], dtype=np.int16)) == 0.0

    def test_explicit_sample_rate_for_arrays(self, make_sine):
        calculator = MetricsCalculator()
        samples = make_sine(8000, 1600)

        assert (calculator.calculate(samples, sample_rate=16000)
                == calculator.calculate(SampleBuffer(samples, sample_rate=16000)))


@pytest.mark.unit
class TestQualityScore:
    """Test cases for the composite quality score."""

    def test_clipping_caps_score(self):
        best_clipping = score_quality(rms=0.3, peak=1.0, snr=40.0, is_clipping=True, is_silent=False)
        assert best_clipping < 50

    def test_increases_with_snr(self):
        scores = [score_quality(rms=0.2, peak=0.5, snr=snr, is_clipping=False, is_silent=False)
                  for snr in (0.0, 10.0, 20.0, 30.0)]
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]

    def test_silence_is_low_not_negative(self):
        score = score_quality(rms=0.0, peak=0.0, snr=0.0, is_clipping=False, is_silent=True)
        assert 0 <= score < 50

    def test_clamped_to_range(self):
        assert score_quality(rms=0.3, peak=0.5, snr=1000.0, is_clipping=False, is_silent=False) <= 100
        assert score_quality(rms=0.0, peak=1.0, snr=-50.0, is_clipping=True, is_silent=True) >= 0

    def test_to_db(self):
        assert to_db(0.0) == -100.0
        assert to_db(1.0) == 0.0
        assert to_db(0.1) == pytest.approx(-20.0)
        assert to_db(1e-9) == -100.0

    def test_threshold_constants(self):
        assert SILENCE_THRESHOLD == pytest.approx(0.01)
        assert CLIPPING_THRESHOLD == pytest.approx(0.95)

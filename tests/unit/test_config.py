"""Unit tests for configuration, constraints and presets."""

import pytest
from pathlib import Path

from audioguard.config import AudioGuardConfig, DEFAULT_CONSTRAINTS
from audioguard.config.constraints import MAX_FILE_SIZE_BYTES, RecordingConstraints
from audioguard.config.presets import AudioQuality, QualityPreset, LOW, MEDIUM, HIGH, get_preset


@pytest.mark.unit
class TestRecordingConstraints:
    """Test cases for RecordingConstraints."""

    def test_defaults(self):
        constraints = RecordingConstraints()

        assert constraints.max_file_size_bytes == MAX_FILE_SIZE_BYTES == 25 * 1024 * 1024
        assert constraints.bytes_per_second == 32000
        assert constraints.samples_per_buffer == 1600
        assert constraints.max_recording_duration_seconds == pytest.approx(MAX_FILE_SIZE_BYTES / 32000)

    @pytest.mark.parametrize("overrides", [
        {"max_file_size_bytes": -1},
        {"max_file_size_bytes": 0},
        {"clipping_threshold": 1.5},
        {"silence_threshold": 0.0},
        {"silence_threshold": 0.5, "clipping_threshold": 0.4},
        {"sample_rate": 0},
        {"channels": 0},
        {"bits_per_sample": 24},
        {"buffer_duration_ms": 0},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            RecordingConstraints(**overrides)

    def test_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONSTRAINTS.max_file_size_bytes = 1


@pytest.mark.unit
class TestQualityPresets:
    """Test cases for quality presets."""

    def test_low_enables_nothing(self):
        assert not (LOW.noise_reduction or LOW.normalization or LOW.silence_trimming)

    def test_medium_is_partial(self):
        assert MEDIUM.silence_trimming and MEDIUM.normalization
        assert not MEDIUM.noise_reduction

    def test_high_enables_everything(self):
        assert HIGH.noise_reduction and HIGH.normalization and HIGH.silence_trimming

    def test_lookup(self):
        assert get_preset(AudioQuality.HIGH) is HIGH
        assert get_preset("Low") is LOW
        assert QualityPreset.for_quality(" medium ") is MEDIUM

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            get_preset("ultra")

    def test_contradictory_flags_rejected(self):
        with pytest.raises(ValueError):
            QualityPreset(AudioQuality.HIGH, noise_reduction=True, normalization=False, silence_trimming=True)

    def test_unsupported_bit_depth_rejected(self):
        with pytest.raises(ValueError):
            QualityPreset(AudioQuality.LOW, False, False, False, bit_depth=8)


@pytest.mark.unit
class TestAudioGuardConfig:
    """Test cases for the YAML configuration loader."""

    def test_load_and_get(self, config_file):
        path = config_file(
            "recording:\n"
            "  max_file_size_bytes: 64000\n"
            "  silence_threshold: 0.02\n"
            "processing:\n"
            "  quality_preset: high\n"
        )
        config = AudioGuardConfig(path)

        assert config.get('recording.max_file_size_bytes') == 64000
        assert config.get('recording.missing', 'default') == 'default'
        assert config.get_quality_preset() is HIGH

        constraints = config.get_recording_constraints()
        assert constraints.max_file_size_bytes == 64000
        assert constraints.silence_threshold == 0.02
        assert constraints.clipping_threshold == DEFAULT_CONSTRAINTS.clipping_threshold

    def test_defaults_without_sections(self, config_file):
        config = AudioGuardConfig(config_file("logging:\n  level: DEBUG\n"))

        assert config.get_recording_constraints() is DEFAULT_CONSTRAINTS
        assert config.get_quality_preset() is MEDIUM

    def test_set_creates_nested_keys(self, config_file):
        config = AudioGuardConfig(config_file("logging:\n  level: INFO\n"))
        config.set('processing.quality_preset', 'low')

        assert config.get_quality_preset() is LOW

    def test_relative_paths_resolved(self, config_file, temp_data_dir):
        config = AudioGuardConfig(config_file(
            "storage:\n  output_directory: out\nlogging:\n  file_path: logs/audioguard.log\n"
        ))

        assert config.get('storage.output_directory') == str(Path(temp_data_dir) / "out")
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs" / "audioguard.log")
        assert Path(config.get_output_directory()).is_absolute()

    def test_invalid_constraint_fails_at_load(self, config_file):
        with pytest.raises(ValueError):
            AudioGuardConfig(config_file("recording:\n  max_file_size_bytes: -5\n"))

    @pytest.mark.parametrize("value", ['"x"', "true", "[1, 2]"])
    def test_non_numeric_constraint_fails_at_load(self, config_file, value):
        with pytest.raises(ValueError, match="clipping_threshold"):
            AudioGuardConfig(config_file(f"recording:\n  clipping_threshold: {value}\n"))

    def test_unknown_preset_fails_at_load(self, config_file):
        with pytest.raises(ValueError):
            AudioGuardConfig(config_file("processing:\n  quality_preset: ultra\n"))

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            AudioGuardConfig(str(Path(temp_data_dir) / "missing.yaml"))

    def test_empty_file(self, config_file):
        with pytest.raises(ValueError):
            AudioGuardConfig(config_file(""))

    def test_invalid_yaml(self, config_file):
        with pytest.raises(ValueError):
            AudioGuardConfig(config_file("recording: [unclosed\n"))

    def test_example_config_loads(self):
        example = Path(__file__).resolve().parents[2] / "audioguard.yaml"
        config = AudioGuardConfig(str(example))

        assert config.get_recording_constraints() == DEFAULT_CONSTRAINTS
        assert config.get_quality_preset() is MEDIUM

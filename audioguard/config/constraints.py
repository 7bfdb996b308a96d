"""Recording constraints shared by the metrics, processing and monitoring layers."""

from dataclasses import dataclass

# Upload cap of the transcription service (25 MiB).
MAX_FILE_SIZE_BYTES = 25 * 1024 * 1024

# Peak level (fraction of full scale) at or above which a buffer is clipping.
CLIPPING_THRESHOLD = 0.95

# RMS level (fraction of full scale) below which a buffer is silent.
SILENCE_THRESHOLD = 0.01

SAMPLE_RATE = 16000
BITS_PER_SAMPLE = 16
CHANNELS = 1
AUDIO_BUFFER_DURATION_MS = 100
MIN_RECORDING_DURATION_MS = 100

# Magnitude of a full-scale 16-bit sample.
FULL_SCALE = 32768.0

# dBFS reported for true silence instead of log10(0).
SILENCE_DB = -100.0


@dataclass(frozen=True)
class RecordingConstraints:
    """Immutable recording tunables, validated on construction."""
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    clipping_threshold: float = CLIPPING_THRESHOLD
    silence_threshold: float = SILENCE_THRESHOLD
    sample_rate: int = SAMPLE_RATE
    bits_per_sample: int = BITS_PER_SAMPLE
    channels: int = CHANNELS
    buffer_duration_ms: int = AUDIO_BUFFER_DURATION_MS
    min_recording_duration_ms: int = MIN_RECORDING_DURATION_MS

    def __post_init__(self):
        if self.max_file_size_bytes <= 0:
            raise ValueError(f"max_file_size_bytes must be positive, got {self.max_file_size_bytes}")
        for name in ("clipping_threshold", "silence_threshold"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.silence_threshold >= self.clipping_threshold:
            raise ValueError(
                f"silence_threshold ({self.silence_threshold}) must be below "
                f"clipping_threshold ({self.clipping_threshold})"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")
        if self.bits_per_sample != 16:
            raise ValueError(f"Only 16-bit PCM is supported, got {self.bits_per_sample} bits")
        if self.buffer_duration_ms <= 0:
            raise ValueError(f"buffer_duration_ms must be positive, got {self.buffer_duration_ms}")
        if self.min_recording_duration_ms < 0:
            raise ValueError(
                f"min_recording_duration_ms must not be negative, got {self.min_recording_duration_ms}"
            )

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.channels * self.bits_per_sample // 8

    @property
    def max_recording_duration_seconds(self) -> float:
        """Seconds of audio that fit under the file size cap."""
        return self.max_file_size_bytes / self.bytes_per_second

    @property
    def samples_per_buffer(self) -> int:
        return self.sample_rate * self.buffer_duration_ms // 1000


DEFAULT_CONSTRAINTS = RecordingConstraints()

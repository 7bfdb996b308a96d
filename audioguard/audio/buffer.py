"""Fixed-rate PCM sample buffers."""

from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from ..config.constraints import SAMPLE_RATE, CHANNELS

BYTES_PER_SAMPLE = 2  # 16-bit audio

INT16_MIN = -32768
INT16_MAX = 32767


@dataclass(frozen=True)
class SampleBuffer:
    """Ordered 16-bit signed PCM samples for one capture window."""
    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")
        samples = np.asarray(self.samples)
        if samples.dtype != np.int16:
            samples = _to_int16(samples)
        object.__setattr__(self, "samples", samples.reshape(-1))

    @classmethod
    def from_bytes(cls, data: bytes, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> "SampleBuffer":
        """Build a buffer from little-endian PCM16 bytes."""
        if len(data) % BYTES_PER_SAMPLE:
            raise ValueError(f"PCM16 data must have an even byte length, got {len(data)}")
        samples = np.frombuffer(data, dtype="<i2").astype(np.int16)
        return cls(samples, sample_rate=sample_rate, channels=channels)

    @classmethod
    def from_array(cls, values: Any, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> "SampleBuffer":
        """Build a buffer from any numeric sequence, clipping to the int16 range."""
        return cls(_to_int16(np.asarray(values)), sample_rate=sample_rate, channels=channels)

    def to_bytes(self) -> bytes:
        return self.samples.astype("<i2").tobytes()

    @property
    def byte_length(self) -> int:
        return self.samples.size * BYTES_PER_SAMPLE

    @property
    def duration_seconds(self) -> float:
        return self.samples.size / float(self.sample_rate * self.channels)

    def __len__(self) -> int:
        return int(self.samples.size)

    def with_samples(self, samples: np.ndarray) -> "SampleBuffer":
        """Return a buffer with the same format holding ``samples``."""
        return SampleBuffer(samples, sample_rate=self.sample_rate, channels=self.channels)


def _to_int16(values: np.ndarray) -> np.ndarray:
    if values.dtype.kind == "f":
        values = np.rint(values)
    return np.clip(values, INT16_MIN, INT16_MAX).astype(np.int16)


def as_samples(buffer: Union[SampleBuffer, np.ndarray, Any]) -> np.ndarray:
    """Return the int16 samples of ``buffer``.

    Raises:
        ValueError: if ``buffer`` is None (an empty buffer is fine)
    """
    if buffer is None:
        raise ValueError("Audio buffer must not be None")
    if isinstance(buffer, SampleBuffer):
        return buffer.samples
    samples = np.asarray(buffer)
    if samples.dtype != np.int16:
        samples = _to_int16(samples)
    return samples.reshape(-1)


def sample_rate_of(buffer: Any, default: int = SAMPLE_RATE) -> int:
    if isinstance(buffer, SampleBuffer):
        return buffer.sample_rate
    return default


def wrap_like(original: Any, samples: np.ndarray) -> Union[SampleBuffer, np.ndarray]:
    """Return ``samples`` in the same container type as ``original``."""
    if isinstance(original, SampleBuffer):
        return original.with_samples(samples)
    return samples

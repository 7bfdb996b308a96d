"""Quality presets selecting which processing stages run for a session."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .constraints import SAMPLE_RATE, BITS_PER_SAMPLE


class AudioQuality(Enum):
    """Quality tier chosen once per recording session."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class QualityPreset:
    """Processing stage toggles for one quality tier."""
    quality: AudioQuality
    noise_reduction: bool
    normalization: bool
    silence_trimming: bool
    sample_rate: int = SAMPLE_RATE
    bit_depth: int = BITS_PER_SAMPLE

    def __post_init__(self):
        if not isinstance(self.quality, AudioQuality):
            raise ValueError(f"quality must be an AudioQuality, got {self.quality!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.bit_depth != 16:
            raise ValueError(f"Only 16-bit presets are supported, got {self.bit_depth}")
        # The gate attenuates, so gated audio has to be re-levelled afterwards.
        if self.noise_reduction and not self.normalization:
            raise ValueError("noise_reduction requires normalization to be enabled")

    @classmethod
    def for_quality(cls, quality: Union["AudioQuality", str]) -> "QualityPreset":
        """Return the built-in preset for ``quality`` (enum member or name)."""
        if isinstance(quality, str):
            try:
                quality = AudioQuality[quality.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown quality preset: {quality}") from None
        if not isinstance(quality, AudioQuality):
            raise ValueError(f"Unknown quality preset: {quality!r}")
        return _PRESETS[quality]


LOW = QualityPreset(
    quality=AudioQuality.LOW,
    noise_reduction=False,
    normalization=False,
    silence_trimming=False,
)

MEDIUM = QualityPreset(
    quality=AudioQuality.MEDIUM,
    noise_reduction=False,
    normalization=True,
    silence_trimming=True,
)

HIGH = QualityPreset(
    quality=AudioQuality.HIGH,
    noise_reduction=True,
    normalization=True,
    silence_trimming=True,
)

_PRESETS = {
    AudioQuality.LOW: LOW,
    AudioQuality.MEDIUM: MEDIUM,
    AudioQuality.HIGH: HIGH,
}


def get_preset(quality: Union[AudioQuality, str]) -> QualityPreset:
    """Look up a built-in preset by enum member or case-insensitive name."""
    return QualityPreset.for_quality(quality)

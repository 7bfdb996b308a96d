"""Pytest configuration and fixtures for AudioGuard tests."""

import pytest
import tempfile
import logging
from pathlib import Path
import numpy as np
import wave

from audioguard.audio.buffer import SampleBuffer
from audioguard.config.constraints import RecordingConstraints


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests driving several components together")


def sine(amplitude, num_samples, freq=440.0, sample_rate=SAMPLE_RATE, phase=0.0):
    """Generate a sine wave as int16 samples."""
    t = np.arange(num_samples) / sample_rate
    wave_data = amplitude * np.sin(2 * np.pi * freq * t + phase)
    return np.clip(np.rint(wave_data), -32768, 32767).astype(np.int16)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def make_sine():
    """Factory for sine wave buffers."""
    return sine


@pytest.fixture
def speech_buffer():
    """100 ms of a comfortable-level 440 Hz tone."""
    return SampleBuffer(sine(8000, 1600))


@pytest.fixture
def silent_buffer():
    """100 ms of digital silence."""
    return SampleBuffer(np.zeros(1600, dtype=np.int16))


@pytest.fixture
def clipping_buffer():
    """Tone with periodic full-scale samples."""
    samples = sine(8000, 1600)
    samples[::10] = 32767
    samples[5::10] = -32767
    return SampleBuffer(samples)


@pytest.fixture
def mixed_recording():
    """Silence, a clipped segment, a quiet segment and a normal tone."""
    silence = np.zeros(1600, dtype=np.int16)
    clipped = sine(40000, 1600)
    quiet = sine(100, 1600)
    normal = sine(8000, 3200)
    return SampleBuffer(np.concatenate([silence, clipped, quiet, normal]))


@pytest.fixture
def small_constraints():
    """Constraints with a 32000 byte (1 second) size cap."""
    return RecordingConstraints(max_file_size_bytes=32000)


@pytest.fixture
def sample_wav_file(temp_data_dir):
    """Write a WAV file with leading silence and a tone."""
    file_path = Path(temp_data_dir) / "test_audio.wav"
    samples = np.concatenate([
        np.zeros(3200, dtype=np.int16),
        sine(8000, 16000),
        np.zeros(3200, dtype=np.int16),
    ])

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)  # Mono
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(samples.astype('<i2').tobytes())

    return str(file_path)


@pytest.fixture
def config_file(temp_data_dir):
    """Write a YAML configuration file and return its path."""
    def write(content: str) -> str:
        path = Path(temp_data_dir) / "audioguard.yaml"
        path.write_text(content, encoding="utf-8")
        return str(path)
    return write


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()

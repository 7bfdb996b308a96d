"""WAV file reading and writing for recorded and processed audio."""

import wave
import logging
from pathlib import Path
from typing import Union

from ..audio.buffer import SampleBuffer, BYTES_PER_SAMPLE

logger = logging.getLogger(__name__)


def read_wav(filepath: Union[str, Path]) -> SampleBuffer:
    """Load a 16-bit mono WAV file.

    Args:
        filepath: Path of the WAV file

    Returns:
        SampleBuffer with the file's samples and sample rate
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Audio file not found: {filepath}")

    try:
        with wave.open(str(filepath), 'rb') as wf:
            if wf.getsampwidth() != BYTES_PER_SAMPLE:
                raise ValueError(f"Only 16-bit PCM WAV is supported, got {wf.getsampwidth() * 8}-bit: {filepath}")
            if wf.getnchannels() != 1:
                raise ValueError(f"Only mono WAV is supported, got {wf.getnchannels()} channels: {filepath}")
            sample_rate = wf.getframerate()
            data = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Not a valid PCM WAV file: {filepath} ({e})") from e

    buffer = SampleBuffer.from_bytes(data, sample_rate=sample_rate)
    logger.info(f"Loaded {filepath}: {len(buffer)} samples at {sample_rate}Hz "
                f"({buffer.duration_seconds:.1f}s)")
    return buffer


def write_wav(filepath: Union[str, Path], buffer: SampleBuffer) -> None:
    """Save ``buffer`` as a 16-bit WAV file.

    Args:
        filepath: Path to save the WAV file
        buffer: Audio to write
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with wave.open(str(filepath), 'wb') as wf:
        wf.setnchannels(buffer.channels)
        wf.setsampwidth(BYTES_PER_SAMPLE)
        wf.setframerate(buffer.sample_rate)
        wf.writeframes(buffer.to_bytes())

    logger.info(f"Audio saved to {filepath} ({buffer.byte_length} bytes of audio)")

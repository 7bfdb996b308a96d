"""Audio file storage."""

from .wav_file import read_wav, write_wav

__all__ = ["read_wav", "write_wav"]

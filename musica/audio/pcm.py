"""Conversion of captured PCM data into normalized float blocks."""

from __future__ import annotations
import numpy as np
from typing import Union

from ..logger import get_logger

logger = get_logger(__name__)

# Full scale of 16-bit signed PCM
PCM16_FULL_SCALE = 32768.0


def normalize_pcm16(data: Union[bytes, bytearray, memoryview, np.ndarray]) -> np.ndarray:
    """Convert 16-bit signed little-endian PCM to floats in [-1, 1).

    Args:
        data: Raw little-endian bytes, or an integer array of samples

    Returns:
        float64 array, one value per sample
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        if len(raw) % 2:
            logger.warning(f"Dropping trailing odd byte from {len(raw)}-byte PCM buffer")
            raw = raw[:-1]
        samples = np.frombuffer(raw, dtype="<i2")
    else:
        samples = np.asarray(data)
    return samples.astype(np.float64) / PCM16_FULL_SCALE


def to_mono(samples: np.ndarray, channel_count: int = 1) -> np.ndarray:
    """Extract the first channel from interleaved or (frames x channels) audio."""
    if channel_count < 1:
        raise ValueError("Channel count must be at least 1")
    audio = np.asarray(samples, dtype=float)
    if audio.ndim > 1:
        return audio[:, 0]
    if channel_count == 1:
        return audio
    frames = audio.size // channel_count
    return audio[: frames * channel_count].reshape(frames, channel_count)[:, 0]

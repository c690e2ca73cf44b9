"""Type definitions for the Musica project."""

from typing import Optional
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class FilterCoefficients:
    """Fixed FIR taps together with the parameters they were designed for."""

    taps: np.ndarray  # Read-only float64 array, len == order
    sample_rate: int  # Hz
    cutoff_frequency: float  # Hz
    order: int  # Number of taps

    def __len__(self) -> int:
        return len(self.taps)

    def __iter__(self):
        return iter(self.taps)

    def __getitem__(self, index):
        return self.taps[index]

    @property
    def dc_gain(self) -> float:
        """Sum of the taps, the filter's response at 0 Hz."""
        return float(np.sum(self.taps))


@dataclass(frozen=True)
class NoteEvent:
    """A single detection result, produced once per audio block."""

    note: Optional[str]  # Note name (e.g., 'A', 'C#'), None for no detection
    octave: Optional[int]  # e.g. 4, may be negative below C0
    frequency: float = 0.0  # Estimated dominant frequency in Hz

    @property
    def detected(self) -> bool:
        return self.note is not None

    @property
    def label(self) -> str:
        """Note with octave (e.g., 'A4', 'B-1'), or 'none'."""
        if self.note is None:
            return "none"
        return f"{self.note}{self.octave}"

    def __str__(self):
        return self.label


# Sentinel emitted for silent, empty or otherwise degenerate blocks
NO_DETECTION = NoteEvent(note=None, octave=None)


@dataclass
class SpectrumResult:
    """Magnitude spectrum of one block and the bin that won the arg-max."""

    magnitudes: np.ndarray
    peak_index: Optional[int]  # None when nothing was found (empty/silent block)
    frequency: float = 0.0
    bin_width: float = 0.0  # sample_rate / N

    @property
    def peak_magnitude(self) -> float:
        if self.peak_index is None:
            return 0.0
        return float(self.magnitudes[self.peak_index])

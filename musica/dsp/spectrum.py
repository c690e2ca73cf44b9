"""Dominant-frequency estimation from the magnitude spectrum of a block."""

from __future__ import annotations
import numpy as np
from typing import Sequence

from ..logger import get_logger
from ..note_types import NoteEvent, NO_DETECTION, SpectrumResult
from ..note_utils import map_to_note

logger = get_logger(__name__)


class SpectralPitchEstimator:
    """Maps the strongest DFT bin of a block to a note.

    The full complex DFT of the block is used with no window and no zero
    padding, so the frequency resolution is ``sample_rate / len(block)``.
    Bins past N/2 mirror the positive frequencies and are searched too by
    default. Magnitudes within TIE_TOLERANCE of the maximum count as equal
    and the lowest such bin wins, so for real input the lower bin of a mirror
    pair is always chosen, even when rounding leaves the upper one a hair
    larger. ``fold_mirror=True`` never looks past ``k = N/2`` at all.
    """

    # Peaks within this relative distance of the maximum count as ties,
    # and ties go to the lowest bin
    TIE_TOLERANCE = 1e-9

    def __init__(
        self, sample_rate: int, fold_mirror: bool = False, use_flats: bool = False
    ) -> None:
        """Initialize the estimator.

        Args:
            sample_rate: Sample rate of the incoming blocks in Hz
            fold_mirror: If True, ignore bins above the Nyquist bin
            use_flats: If True, report flat note names (e.g., 'Bb') instead of sharps
        """
        if sample_rate <= 0:
            raise ValueError("Sample rate must be positive")
        self._sample_rate = sample_rate
        self._fold_mirror = fold_mirror
        self._use_flats = use_flats

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def fold_mirror(self) -> bool:
        return self._fold_mirror

    @property
    def use_flats(self) -> bool:
        return self._use_flats

    def spectrum(self, block: Sequence[float]) -> SpectrumResult:
        """Compute the magnitude spectrum of ``block`` and locate its peak."""
        samples = np.asarray(block, dtype=float).ravel()
        n = samples.size
        if n == 0:
            return SpectrumResult(magnitudes=np.zeros(0), peak_index=None)

        # Real samples lifted to complex with zero imaginary part
        transformed = np.fft.fft(samples.astype(complex))
        magnitudes = np.abs(transformed)
        bin_width = self._sample_rate / n

        search = magnitudes[: n // 2 + 1] if self._fold_mirror else magnitudes
        peak = float(np.max(search))
        if not np.isfinite(peak) or peak == 0.0:
            return SpectrumResult(magnitudes=magnitudes, peak_index=None, bin_width=bin_width)

        peak_index = int(np.flatnonzero(search >= peak * (1.0 - self.TIE_TOLERANCE))[0])
        return SpectrumResult(
            magnitudes=magnitudes,
            peak_index=peak_index,
            frequency=peak_index * bin_width,
            bin_width=bin_width,
        )

    def estimate(self, block: Sequence[float]) -> NoteEvent:
        """Estimate the dominant note of a filtered block.

        Returns:
            NoteEvent for the dominant frequency, or NO_DETECTION for empty,
            silent or non-finite blocks and for a DC-bin peak
        """
        result = self.spectrum(block)
        if result.peak_index is None:
            logger.debug(f"No spectral peak in block of {len(result.magnitudes)} samples")
            return NO_DETECTION

        event = map_to_note(result.frequency, self._use_flats)
        logger.debug(
            f"Peak bin {result.peak_index}/{len(result.magnitudes)}: "
            f"{result.frequency:.1f}Hz -> {event.label} (magnitude {result.peak_magnitude:.3f})"
        )
        return event


def estimate(filtered_block: Sequence[float], sample_rate: int) -> NoteEvent:
    """Estimate the dominant note of ``filtered_block`` with default settings."""
    return SpectralPitchEstimator(sample_rate).estimate(filtered_block)

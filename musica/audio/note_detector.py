"""Block-wise note detection: low-pass filtering followed by spectral pitch estimation."""

from __future__ import annotations
import numpy as np
from typing import Optional, Callable, ClassVar, Sequence, Union

from ..logger import get_logger
from ..note_types import NoteEvent, NO_DETECTION, FilterCoefficients
from ..dsp.coefficients import generate_lowpass_coefficients
from ..dsp.fir_filter import StreamingFIRFilter
from ..dsp.spectrum import SpectralPitchEstimator
from ..core.interfaces import INoteDetector
from .pcm import normalize_pcm16, to_mono

logger = get_logger(__name__)


class NoteDetector(INoteDetector):
    """Turns a stream of audio blocks into one NoteEvent per block.

    Each instance owns its own filter history, so one detector must serve
    exactly one capture stream. When capture restarts, call reset() or build
    a new detector.
    """

    # Pipeline defaults
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    CUTOFF_FREQUENCY: ClassVar[float] = 1000.0  # Hz
    FILTER_ORDER: ClassVar[int] = 64  # Taps

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        cutoff_frequency: float = CUTOFF_FREQUENCY,
        order: int = FILTER_ORDER,
        fold_mirror: bool = False,
        use_flats: bool = False,
        callback: Optional[Callable[[NoteEvent], None]] = None,
    ) -> None:
        """Initialize the NoteDetector.

        Args:
            sample_rate: Audio sample rate in Hz, fixed for the detector's lifetime
            cutoff_frequency: Low-pass cutoff in Hz
            order: Number of filter taps
            fold_mirror: If True, ignore spectral bins above Nyquist
            use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')
            callback: Optional function called with every NoteEvent

        Raises:
            ValueError: If the filter parameters are invalid
        """
        self._sample_rate = sample_rate
        self._coefficients = generate_lowpass_coefficients(sample_rate, cutoff_frequency, order)
        self._filter = StreamingFIRFilter(self._coefficients)
        self._estimator = SpectralPitchEstimator(
            sample_rate, fold_mirror=fold_mirror, use_flats=use_flats
        )
        self._callback = callback
        self._last_event: NoteEvent = NO_DETECTION
        self._blocks_processed = 0

        logger.info(
            f"Note detector initialized: sample_rate={sample_rate}, "
            f"cutoff={cutoff_frequency}Hz, order={order}, fold_mirror={fold_mirror}"
        )

    def on_audio_block(
        self, samples: Sequence[float], sample_rate: int, channel_count: int = 1
    ) -> NoteEvent:
        """Filter one block, estimate its note and notify the callback.

        Args:
            samples: Normalized samples in [-1, 1], interleaved if multi-channel
            sample_rate: Sample rate of the block in Hz
            channel_count: Number of interleaved channels, only the first is analysed

        Returns:
            The detected NoteEvent, or NO_DETECTION

        Raises:
            ValueError: If the block's sample rate differs from the detector's
        """
        if sample_rate != self._sample_rate:
            raise ValueError(
                f"Block sample rate {sample_rate} Hz does not match the detector's "
                f"{self._sample_rate} Hz"
            )

        mono = to_mono(np.asarray(samples, dtype=float), channel_count)
        filtered = self._filter.process_block(mono)
        event = self._estimator.estimate(filtered)

        self._blocks_processed += 1
        if event.label != self._last_event.label:
            logger.debug(f"Block {self._blocks_processed}: {self._last_event} -> {event}")
        self._last_event = event

        if self._callback:
            try:
                self._callback(event)
            except Exception as e:
                logger.error(f"Error in note detection callback: {e}", exc_info=True)

        return event

    def on_pcm16_block(
        self,
        data: Union[bytes, np.ndarray],
        sample_rate: int,
        channel_count: int = 1,
    ) -> NoteEvent:
        """Same as on_audio_block() for raw 16-bit signed little-endian PCM."""
        return self.on_audio_block(normalize_pcm16(data), sample_rate, channel_count)

    def set_callback(self, callback: Optional[Callable[[NoteEvent], None]]) -> None:
        """Set the callback function for note detection events.

        Args:
            callback: Callback function or None to remove
        """
        self._callback = callback

    def reset(self) -> None:
        """Clear the filter history and the last reported note."""
        self._filter.reset()
        self._last_event = NO_DETECTION
        self._blocks_processed = 0
        logger.debug("Note detector reset")

    def get_current_note(self) -> NoteEvent:
        """Get the note reported for the most recent block."""
        return self._last_event

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def coefficients(self) -> FilterCoefficients:
        return self._coefficients

    @property
    def fir_filter(self) -> StreamingFIRFilter:
        return self._filter

    @property
    def estimator(self) -> SpectralPitchEstimator:
        return self._estimator

    @property
    def blocks_processed(self) -> int:
        return self._blocks_processed

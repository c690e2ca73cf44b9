"""Streaming FIR filter backed by a circular delay line."""

from __future__ import annotations
import numpy as np
from typing import Sequence, Union

from ..logger import get_logger
from ..note_types import FilterCoefficients

logger = get_logger(__name__)


class DelayLine:
    """Circular buffer of the most recent ``length`` input samples.

    The slot under the cursor always holds the oldest sample and the slot
    just before it the newest one, so reading backward from ``cursor - 1``
    walks the history from newest to oldest.
    """

    def __init__(self, length: int) -> None:
        if length < 1:
            raise ValueError("Delay line length must be at least 1")
        self._buffer = np.zeros(length)
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def buffer(self) -> np.ndarray:
        """Read-only view of the raw circular buffer."""
        view = self._buffer.view()
        view.setflags(write=False)
        return view

    def write(self, sample: float) -> int:
        """Store ``sample`` under the cursor and return the index it was written to."""
        index = self._cursor
        self._buffer[index] = sample
        return index

    def advance(self, steps: int = 1) -> None:
        self._cursor = (self._cursor + steps) % len(self._buffer)

    def history(self) -> np.ndarray:
        """The stored samples in time order, oldest first."""
        return np.roll(self._buffer, -self._cursor)

    def load_history(self, samples: np.ndarray, cursor: int) -> None:
        """Replace the contents with ``samples`` (oldest first) laid out around ``cursor``."""
        if len(samples) != len(self._buffer):
            raise ValueError("History length must match the delay line length")
        self._cursor = cursor % len(self._buffer)
        self._buffer[:] = np.roll(samples, self._cursor)

    def reset(self) -> None:
        self._buffer.fill(0.0)
        self._cursor = 0


class StreamingFIRFilter:
    """Direct-form FIR filter whose history survives across blocks.

    Feeding a stream as one block or as many smaller blocks gives the same
    output, since the delay line is only cleared by construction or reset().
    """

    def __init__(self, coefficients: Union[FilterCoefficients, Sequence[float]]) -> None:
        """Initialize the filter.

        Args:
            coefficients: FilterCoefficients from the coefficient generator, or
                any non-empty sequence of taps

        Raises:
            ValueError: If there are no coefficients
        """
        if isinstance(coefficients, FilterCoefficients):
            taps = coefficients.taps
        else:
            taps = np.asarray(coefficients, dtype=float)
        if taps.ndim != 1 or len(taps) == 0:
            raise ValueError("FIR filter needs a non-empty 1-D coefficient sequence")

        self._coefficients = coefficients
        self._taps = np.array(taps, dtype=float)
        self._taps.setflags(write=False)
        self._order = len(self._taps)
        self._delay_line = DelayLine(self._order)

        # Tap offsets, newest sample first
        self._tap_offsets = np.arange(self._order)

        logger.debug(f"FIR filter created with {self._order} taps")

    @property
    def order(self) -> int:
        return self._order

    @property
    def taps(self) -> np.ndarray:
        return self._taps

    @property
    def coefficients(self) -> Union[FilterCoefficients, Sequence[float]]:
        return self._coefficients

    @property
    def delay_line(self) -> DelayLine:
        return self._delay_line

    def process_sample(self, x: float) -> float:
        """Filter one sample.

        The sample is written at the cursor, the convolution sum walks the
        delay line backward from there (tap 0 against the newest sample),
        then the cursor moves forward one slot.
        """
        index = self._delay_line.write(x)
        read = (index - self._tap_offsets) % self._order
        y = float(np.dot(self._taps, self._delay_line.buffer[read]))
        self._delay_line.advance()
        return y

    def process_block(self, samples: Sequence[float]) -> np.ndarray:
        """Filter a block of samples, continuing from the current history.

        Equivalent to calling process_sample() on every element in order,
        and leaves the delay line in the same state.

        Args:
            samples: Normalized input samples

        Returns:
            A new float64 array of the same length as ``samples``
        """
        block = np.asarray(samples, dtype=float).ravel()
        if block.size == 0:
            return np.zeros(0)

        # The newest order-1 stored samples followed by the block
        history = self._delay_line.history()
        extended = np.concatenate((history[1:], block))
        output = np.convolve(extended, self._taps, mode="valid")

        self._delay_line.load_history(
            extended[-self._order :], self._delay_line.cursor + block.size
        )
        return output

    def reset(self) -> None:
        """Clear the delay line, as if the filter was freshly constructed."""
        self._delay_line.reset()
        logger.debug("FIR filter delay line reset")

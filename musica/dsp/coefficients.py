"""Windowed-sinc low-pass FIR coefficient design."""

from __future__ import annotations
import numpy as np

from ..logger import get_logger
from ..note_types import FilterCoefficients

logger = get_logger(__name__)

# Hamming window constants
HAMMING_ALPHA = 0.54
HAMMING_BETA = 0.46


def ideal_sinc_kernel(sample_rate: int, cutoff_frequency: float, order: int) -> np.ndarray:
    """Truncated ideal low-pass kernel centered at index ``(order - 1) // 2``.

    The center tap is ``2 * fc``, the tap ``k`` samples away is
    ``sin(2 pi fc k) / (pi k)``, with ``fc = cutoff_frequency / sample_rate``.
    """
    fc = cutoff_frequency / sample_rate
    k = np.arange(order) - (order - 1) // 2
    # np.sinc(x) is sin(pi x) / (pi x), with the limit 1 at x == 0
    return 2 * fc * np.sinc(2 * fc * k)


def hamming_window(order: int) -> np.ndarray:
    """0.54 - 0.46 cos(2 pi i / (order - 1)) for i in [0, order)."""
    i = np.arange(order)
    return HAMMING_ALPHA - HAMMING_BETA * np.cos(2 * np.pi * i / (order - 1))


def generate_lowpass_coefficients(
    sample_rate: int, cutoff_frequency: float, order: int
) -> FilterCoefficients:
    """Design a Hamming-windowed sinc low-pass filter.

    With an even order the kernel center sits half a sample early, the same
    integer center index is used for every order.

    Args:
        sample_rate: Sample rate in Hz
        cutoff_frequency: Cutoff frequency in Hz, strictly between 0 and Nyquist
        order: Number of taps. An order of 1 yields a unity pass-through filter.

    Returns:
        Immutable FilterCoefficients with ``order`` taps

    Raises:
        ValueError: If any parameter is out of range
    """
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise ValueError(f"Filter order must be an integer, got {order!r}")
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)):
        raise ValueError(f"Sample rate must be an integer, got {sample_rate!r}")
    if sample_rate <= 0:
        raise ValueError("Sample rate must be positive")
    if order < 1:
        raise ValueError("Filter order must be at least 1")
    nyquist = sample_rate / 2.0
    if not 0 < cutoff_frequency < nyquist:
        raise ValueError(
            f"Cutoff frequency must be between 0 and {nyquist} Hz, got {cutoff_frequency}"
        )

    if order == 1:
        # The window is undefined for a single tap
        logger.warning("Filter order 1 requested, using a unity pass-through filter")
        taps = np.ones(1)
    else:
        taps = ideal_sinc_kernel(sample_rate, cutoff_frequency, order) * hamming_window(order)

    taps.setflags(write=False)
    coefficients = FilterCoefficients(
        taps=taps,
        sample_rate=int(sample_rate),
        cutoff_frequency=float(cutoff_frequency),
        order=int(order),
    )
    logger.info(
        f"Low-pass filter designed: sample_rate={sample_rate}, "
        f"cutoff={cutoff_frequency}Hz, order={order}, dc_gain={coefficients.dc_gain:.4f}"
    )
    return coefficients

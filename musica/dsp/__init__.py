"""DSP pipeline: low-pass FIR filtering and spectral pitch estimation."""

from .coefficients import generate_lowpass_coefficients
from .fir_filter import DelayLine, StreamingFIRFilter
from .spectrum import SpectralPitchEstimator, estimate

__all__ = [
    "generate_lowpass_coefficients",
    "DelayLine",
    "StreamingFIRFilter",
    "SpectralPitchEstimator",
    "estimate",
]

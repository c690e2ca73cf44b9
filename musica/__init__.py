"""Musica: real-time note detection from a low-pass filtered audio stream."""

from .note_types import FilterCoefficients, NoteEvent, NO_DETECTION
from .note_utils import map_to_note, frequency_to_note_name
from .dsp import generate_lowpass_coefficients, StreamingFIRFilter, SpectralPitchEstimator
from .audio import NoteDetector

__version__ = "0.1.0"

__all__ = [
    "FilterCoefficients",
    "NoteEvent",
    "NO_DETECTION",
    "map_to_note",
    "frequency_to_note_name",
    "generate_lowpass_coefficients",
    "StreamingFIRFilter",
    "SpectralPitchEstimator",
    "NoteDetector",
]

"""Audio capture and block-wise note detection."""

from .note_detector import NoteDetector
from .pcm import normalize_pcm16, to_mono

__all__ = ["NoteDetector", "normalize_pcm16", "to_mono"]

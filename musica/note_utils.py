"""Utility functions for working with musical notes and frequencies."""

import math
from typing import List

from .logger import get_logger
from .note_types import NoteEvent, NO_DETECTION

logger = get_logger(__name__)

NOTE_NAMES_SHARPS: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]
NOTE_NAMES_FLATS: List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Standard reference: A4 = 440Hz, C0 sits 4.75 octaves (57 half steps) below it
A4_FREQUENCY = 440.0
C0_FREQUENCY = A4_FREQUENCY * 2 ** -4.75


def half_steps_from_c0(frequency: float) -> int:
    """Number of equal-tempered half steps between C0 and ``frequency``, rounded."""
    return round(12 * math.log2(frequency / C0_FREQUENCY))


def map_to_note(frequency: float, use_flats: bool = False) -> NoteEvent:
    """Convert a frequency to a note name and octave.

    Args:
        frequency: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        NoteEvent for the nearest equal-tempered note, or NO_DETECTION if the
        frequency is not a positive finite number

    Note:
        - A4 is 440 Hz, C4 is middle C
        - Octave numbers change between B and C (e.g., B3 -> C4)
        - Frequencies below C0 get negative octaves: one half step under C0 is B-1
    """
    if not math.isfinite(frequency) or frequency <= 0:
        logger.debug(f"Non-positive or invalid frequency: {frequency}")
        return NO_DETECTION

    half_steps = half_steps_from_c0(frequency)

    # Python's % and // both floor, so the note index and the octave stay
    # consistent for negative half step counts
    note_index = half_steps % 12
    octave = half_steps // 12

    names = NOTE_NAMES_FLATS if use_flats else NOTE_NAMES_SHARPS
    return NoteEvent(note=names[note_index], octave=octave, frequency=float(frequency))


def frequency_to_note_name(frequency: float, use_flats: bool = False) -> str:
    """Convert a frequency to a label such as 'A4', or 'none' for invalid input."""
    return map_to_note(frequency, use_flats).label

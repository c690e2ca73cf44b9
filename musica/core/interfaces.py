"""Defines the core interfaces for the Musica application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable, Sequence

import numpy as np

from ..note_types import NoteEvent

# Capture handoff: (normalized samples, sample rate, channel count)
AudioBlockCallback = Callable[[np.ndarray, int, int], None]
NoteCallback = Callable[[NoteEvent], None]


class IAudioInput(ABC):
    """Interface for audio capture collaborators."""

    @abstractmethod
    def start(self, callback: AudioBlockCallback) -> bool:
        """Start capturing audio, handing each block to ``callback``."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass

    @property
    @abstractmethod
    def channels(self) -> int:
        """The number of channels in the audio stream."""
        pass


class INoteDetector(ABC):
    """Interface for block-wise note detection pipelines."""

    @abstractmethod
    def on_audio_block(
        self, samples: Sequence[float], sample_rate: int, channel_count: int = 1
    ) -> NoteEvent:
        """Process one block of normalized samples and return its note."""
        pass

    @abstractmethod
    def set_callback(self, callback: Optional[NoteCallback]) -> None:
        """Set a callback to be invoked once per processed block."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Forget all stream history."""
        pass

    @abstractmethod
    def get_current_note(self) -> NoteEvent:
        """Get the note reported for the most recent block."""
        pass


class INoteDetectionService(ABC):
    """Interface for the main note detection service."""

    @abstractmethod
    def start(self, callback: NoteCallback) -> bool:
        """Start the note detection service."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the note detection service."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the service is running."""
        pass

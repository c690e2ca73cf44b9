"""Note detection service that integrates audio input and note detection."""

from __future__ import annotations
from typing import Optional, Callable

import numpy as np

from ..logger import get_logger
from ..note_types import NoteEvent
from ..core.events import NoteDetectionEvents
from ..core.interfaces import INoteDetectionService, INoteDetector, IAudioInput
from .note_detector import NoteDetector

logger = get_logger(__name__)

DetectorFactory = Callable[[int], INoteDetector]


class NoteDetectionService(INoteDetectionService):
    """Service that integrates audio input and note detection.

    This class acts as a facade for the audio input and note detection components,
    providing a simple interface for clients to use. Every start() builds a fresh
    detector, so filter history never leaks from one capture session into the next.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        detector_factory: Optional[DetectorFactory] = None,
        **detector_params,
    ) -> None:
        """Initialize the note detection service.

        Args:
            audio_input: Capture collaborator delivering audio blocks
            detector_factory: Called with the capture sample rate to build a
                detector, or None to build a NoteDetector from detector_params
            **detector_params: Parameters for the default NoteDetector
        """
        self._audio_input = audio_input
        self._detector_factory = detector_factory or (
            lambda sample_rate: NoteDetector(sample_rate=sample_rate, **detector_params)
        )
        self._detector: Optional[INoteDetector] = None
        self._events = NoteDetectionEvents()
        self._callback: Optional[Callable[[NoteEvent], None]] = None
        self._running = False

    @property
    def events(self) -> NoteDetectionEvents:
        return self._events

    @property
    def detector(self) -> Optional[INoteDetector]:
        return self._detector

    @property
    def audio_input(self) -> IAudioInput:
        return self._audio_input

    def start(self, callback: Optional[Callable[[NoteEvent], None]] = None) -> bool:
        """Start note detection.

        Args:
            callback: Function called with the NoteEvent of every block

        Returns:
            True if capture started, False otherwise
        """
        if self._running:
            logger.warning("Note detection already running")
            return True

        self._callback = callback
        self._detector = self._detector_factory(self._audio_input.sample_rate)
        self._detector.set_callback(self._dispatch)

        if not self._audio_input.start(self._process_audio):
            logger.error("Note detection could not start audio input")
            self._detector = None
            return False

        self._running = True
        logger.info("Note detection started")
        return True

    def stop(self) -> None:
        """Stop note detection."""
        if not self._running:
            return

        self._audio_input.stop()
        self._running = False
        logger.info("Note detection stopped")

    def restart(self, audio_input: Optional[IAudioInput] = None) -> bool:
        """Stop, optionally switch to another capture source, and start again.

        Args:
            audio_input: New capture source (e.g. another device), or None to reuse the current one

        Returns:
            True if capture restarted
        """
        callback = self._callback
        self.stop()
        if audio_input is not None:
            self._audio_input = audio_input
        return self.start(callback)

    def is_running(self) -> bool:
        """Check if note detection is running."""
        return self._running

    def get_current_note(self) -> Optional[NoteEvent]:
        """Get the note reported for the most recent block, if any."""
        if self._detector is None:
            return None
        return self._detector.get_current_note()

    def _process_audio(self, samples: np.ndarray, sample_rate: int, channel_count: int) -> None:
        """Hand one captured block to the detector."""
        detector = self._detector
        if detector is None:
            return
        try:
            detector.on_audio_block(samples, sample_rate, channel_count)
        except ValueError as e:
            logger.error(f"Dropping audio block: {e}")

    def _dispatch(self, event: NoteEvent) -> None:
        self._events.emit(event)
        if self._callback:
            try:
                self._callback(event)
            except Exception as e:
                logger.error(f"Error in note detection callback: {e}", exc_info=True)

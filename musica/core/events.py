"""Event system for Musica components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger
from ..note_types import NoteEvent

logger = get_logger(__name__)


class NoteDetectionEventType(Enum):
    """Event types for note detection."""

    NOTE_DETECTED = auto()
    NO_DETECTION = auto()


class EventEmitter:
    """Event emitter for Musica components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Unregister a callback, ignoring callbacks that were never registered."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and does not prevent the remaining
        listeners from running.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        if event_type not in self._listeners:
            return

        for callback in list(self._listeners[event_type]):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class NoteDetectionEvents:
    """Event emitter specifically for note detection events."""

    def __init__(self):
        """Initialize the note detection events."""
        self._emitter = EventEmitter()

    def on_note_detected(self, callback: Callable[[NoteEvent], None]) -> None:
        """Register a callback for blocks where a note was found."""
        self._emitter.on(NoteDetectionEventType.NOTE_DETECTED, callback)

    def on_no_detection(self, callback: Callable[[NoteEvent], None]) -> None:
        """Register a callback for silent or degenerate blocks."""
        self._emitter.on(NoteDetectionEventType.NO_DETECTION, callback)

    def emit(self, event: NoteEvent) -> None:
        """Dispatch ``event`` to the listeners of its type."""
        if event.detected:
            self._emitter.emit(NoteDetectionEventType.NOTE_DETECTED, event)
        else:
            self._emitter.emit(NoteDetectionEventType.NO_DETECTION, event)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()

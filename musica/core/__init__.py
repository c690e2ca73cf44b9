"""Core components for the Musica application."""

# Import interfaces for easier access
from .interfaces import (
    INoteDetector,
    IAudioInput,
    INoteDetectionService,
)

__all__ = ["INoteDetector", "IAudioInput", "INoteDetectionService"]

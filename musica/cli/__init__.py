"""Command-line interface for Musica."""

from .main import main

__all__ = ["main"]

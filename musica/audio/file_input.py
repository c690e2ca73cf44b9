"""Audio file playback as a capture source."""

from __future__ import annotations
import threading
import time
from typing import Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..core.interfaces import IAudioInput, AudioBlockCallback

logger = get_logger(__name__)


class WavFileInput(IAudioInput):
    """Feeds blocks read from an audio file, on a background thread."""

    def __init__(
        self,
        file_path: str,
        frames_per_buffer: int = 4096,
        realtime: bool = True,
        gain: float = 1.0,
    ) -> None:
        """Initialize the file reader.

        Args:
            file_path: Path of any file format soundfile can read
            frames_per_buffer: Block size in frames
            realtime: If True, pace blocks at the file's playback speed
            gain: Linear gain applied to every sample
        """
        self._file_path = file_path
        self._frames_per_buffer = frames_per_buffer
        self._realtime = realtime
        self._gain = gain
        self._callback: Optional[AudioBlockCallback] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    def is_running(self) -> bool:
        return self._running

    def start(self, callback: AudioBlockCallback) -> bool:
        if self._running:
            return True

        self._callback = callback
        self._running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the whole file has been delivered.

        Returns:
            True if the reader finished within ``timeout``
        """
        if self._thread:
            self._thread.join(timeout)
            return not self._thread.is_alive()
        return True

    def _stream_data(self) -> None:
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._running:
                    data = f.read(self._frames_per_buffer, dtype="float64", always_2d=True)
                    if len(data) == 0:
                        break

                    if self._gain != 1.0:
                        data = np.clip(data * self._gain, -1.0, 1.0)

                    if self._callback:
                        self._callback(data.ravel(), self._sample_rate, self._channels)

                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(data) / self._sample_rate)
        except Exception as e:
            logger.error(f"Error streaming audio file {self._file_path}: {e}", exc_info=True)
        finally:
            self._running = False

"""Live audio capture from input devices using sounddevice."""

from __future__ import annotations
from typing import Optional, Dict, Any, List, ClassVar

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from ..core.interfaces import IAudioInput, AudioBlockCallback
from .pcm import normalize_pcm16

logger = get_logger(__name__)

# Sample rates probed when listing devices
COMMON_SAMPLE_RATES = [8000, 16000, 22050, 44100, 48000, 96000]


def list_input_devices() -> List[Dict[str, Any]]:
    """List the audio devices that can record, with their supported sample rates.

    Returns:
        One dict per input device with 'id', 'name', 'max_input_channels',
        'default_samplerate' and 'supported_rates' keys
    """
    result = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] <= 0:
            continue
        supported = []
        for rate in COMMON_SAMPLE_RATES:
            try:
                sd.check_input_settings(device=device_id, samplerate=rate, channels=1)
                supported.append(rate)
            except Exception as e:
                logger.debug(f"Device {device_id} does not support {rate} Hz: {e}")
        result.append(
            {
                "id": device_id,
                "name": device["name"],
                "max_input_channels": device["max_input_channels"],
                "default_samplerate": device["default_samplerate"],
                "supported_rates": supported,
            }
        )
    return result


class SoundDeviceInput(IAudioInput):
    """Live 16-bit capture from an input device using sounddevice."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 4096  # 8192 bytes of 16-bit mono
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Block size in frames, or None for default (4096)
            channels: Number of audio channels, or None for default (1)
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream: Optional[sd.InputStream] = None
        self._callback: Optional[AudioBlockCallback] = None
        self._running = False

    @property
    def device_id(self) -> Optional[int]:
        return self._device_id

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    def is_running(self) -> bool:
        return self._running

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: dict,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Note:
            This is called from the audio thread. indata is only valid for the
            duration of the call, so it is copied before being handed on.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            block = normalize_pcm16(np.array(indata, copy=True)).ravel()
            self._callback(block, self._sample_rate, self._channels)

    def start(self, callback: AudioBlockCallback) -> bool:
        """Start capturing audio and pass each block to the callback.

        Args:
            callback: Function called with (samples, sample_rate, channel_count)

        Returns:
            True if started successfully, False otherwise
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback
        try:
            logger.info(
                f"Starting audio input: device={self._device_id}, "
                f"rate={self._sample_rate}Hz, block={self._frames_per_buffer}"
            )
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                blocksize=self._frames_per_buffer,
                channels=self._channels,
                dtype="int16",
                callback=self._audio_callback,
            )
            self._stream.start()
        except Exception as e:
            logger.error(f"Could not start audio input: {e}")
            if self._stream:
                try:
                    self._stream.close()
                except Exception as close_error:
                    logger.debug(f"Error closing failed stream: {close_error}")
                self._stream = None
            return False

        self._running = True
        logger.info("Audio input started")
        return True

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        try:
            if self._stream:
                self._stream.stop()
                self._stream.close()
                self._stream = None
            logger.info("Audio input stopped")
        except Exception as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._running = False

    def select_device(self, device_id: Optional[int]) -> None:
        """Switch to another input device. Takes effect on the next start()."""
        if self._running:
            raise RuntimeError("Stop the audio input before changing device")
        self._device_id = device_id

"""Factory for creating Musica components."""

from typing import Optional, Dict, Type, Callable

from ..logger import get_logger
from ..dsp.coefficients import generate_lowpass_coefficients
from ..dsp.fir_filter import StreamingFIRFilter
from ..dsp.spectrum import SpectralPitchEstimator
from ..audio.note_detector import NoteDetector
from ..audio.note_detection_service import NoteDetectionService
from ..audio.file_input import WavFileInput
from .config import ConfigManager
from .interfaces import INoteDetector, IAudioInput, INoteDetectionService

logger = get_logger(__name__)


def _create_sound_device_input(**kwargs) -> IAudioInput:
    # sounddevice loads the PortAudio library on import
    from ..audio.audio_input import SoundDeviceInput

    return SoundDeviceInput(**kwargs)


class ComponentFactory:
    """Factory for creating Musica components from stored configuration."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.note_detector_classes: Dict[str, Type[INoteDetector]] = {
            "default": NoteDetector,
        }

        self.audio_input_classes: Dict[str, Callable[..., IAudioInput]] = {
            "default": _create_sound_device_input,
            "file": WavFileInput,
        }

        self.note_detection_service_classes: Dict[str, Type[INoteDetectionService]] = {
            "default": NoteDetectionService,
        }

    def create_filter(self, **kwargs) -> StreamingFIRFilter:
        """Create a streaming low-pass filter.

        Args:
            **kwargs: Overrides for sample_rate, cutoff_frequency and order

        Returns:
            Filter with an empty delay line
        """
        config = self.config_manager.get_config("lowpass_filter")
        config.update(kwargs)
        coefficients = generate_lowpass_coefficients(
            config["sample_rate"], config["cutoff_frequency"], config["order"]
        )
        return StreamingFIRFilter(coefficients)

    def create_estimator(self, **kwargs) -> SpectralPitchEstimator:
        """Create a spectral pitch estimator.

        Args:
            **kwargs: Overrides for sample_rate, fold_mirror and use_flats
        """
        config = self.config_manager.get_config("pitch_estimator")
        config.setdefault(
            "sample_rate", self.config_manager.get_config("lowpass_filter")["sample_rate"]
        )
        config.update(kwargs)
        return SpectralPitchEstimator(**config)

    def create_note_detector(
        self, implementation: str = "default", **kwargs
    ) -> INoteDetector:
        """Create a note detector.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Note detector instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.note_detector_classes:
            raise ValueError(f"Unknown note detector implementation: {implementation}")

        # Filter and estimator sections together make up the detector's parameters
        config = self.config_manager.get_config("lowpass_filter")
        config.update(self.config_manager.get_config("pitch_estimator"))
        config.update(kwargs)

        cls = self.note_detector_classes[implementation]
        instance = cls(**config)

        logger.info(f"Created note detector: {implementation}")
        return instance

    def create_audio_input(
        self, implementation: str = "default", **kwargs
    ) -> IAudioInput:
        """Create an audio input.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Audio input instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.audio_input_classes:
            raise ValueError(f"Unknown audio input implementation: {implementation}")

        if implementation == "file":
            # Rate and channels come from the file itself
            config = {
                "frames_per_buffer": self.config_manager.get_config("audio_input")[
                    "frames_per_buffer"
                ]
            }
        else:
            config = self.config_manager.get_config("audio_input")
        config.update(kwargs)

        cls = self.audio_input_classes[implementation]
        instance = cls(**config)

        logger.info(f"Created audio input: {implementation}")
        return instance

    def create_note_detection_service(
        self, implementation: str = "default", **kwargs
    ) -> INoteDetectionService:
        """Create a note detection service.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor; an
                'audio_input' entry replaces the configured capture source

        Returns:
            Note detection service instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.note_detection_service_classes:
            raise ValueError(f"Unknown note detection service implementation: {implementation}")

        if "audio_input" not in kwargs:
            kwargs["audio_input"] = self.create_audio_input()

        if "detector_factory" not in kwargs:
            kwargs["detector_factory"] = lambda sample_rate: self.create_note_detector(
                sample_rate=sample_rate
            )

        cls = self.note_detection_service_classes[implementation]
        instance = cls(**kwargs)

        logger.info(f"Created note detection service: {implementation}")
        return instance

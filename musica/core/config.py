"""Persistent settings for the note detection pipeline.

Each section is stored as its own JSON file under the configuration directory
(``~/.config/musica`` by default) and maps one-to-one onto the keyword
arguments of the component it configures:

- ``lowpass_filter``: sample_rate, cutoff_frequency, order
- ``pitch_estimator``: fold_mirror, use_flats
- ``audio_input``: sample_rate, frames_per_buffer, channels

Values are checked against the type of their default when loaded or updated,
so a bad file fails before any component is built.
"""

import json
import numbers
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "lowpass_filter": {
        "sample_rate": 44100,
        "cutoff_frequency": 1000.0,
        "order": 64,
    },
    "pitch_estimator": {
        "fold_mirror": False,
        "use_flats": False,
    },
    "audio_input": {
        "sample_rate": 44100,
        "frames_per_buffer": 4096,
        "channels": 1,
    },
}


def _coerce(section: str, key: str, value: Any, default: Any) -> Any:
    """Return ``value`` converted to the type of ``default``.

    Raises:
        ValueError: If the value cannot stand in for the default's type
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
    elif isinstance(default, int):
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            return int(value)
    elif isinstance(default, float):
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return float(value)
    raise ValueError(
        f"{section}.{key} must be {type(default).__name__}, got {value!r}"
    )


def validate_section(name: str, values: Dict[str, Any]) -> Dict[str, Any]:
    """Check a section's values against its defaults.

    Keys the section does not know are dropped with a warning.

    Args:
        name: Section name
        values: Values read from disk or passed by the caller

    Returns:
        A new dictionary holding only known keys, with normalized types

    Raises:
        ValueError: If the section is unknown or a value has the wrong type
    """
    if name not in DEFAULT_CONFIGS:
        raise ValueError(f"Unknown configuration: {name}")

    defaults = DEFAULT_CONFIGS[name]
    checked = {}
    for key, value in values.items():
        if key not in defaults:
            logger.warning(f"Ignoring unknown setting {name}.{key}")
            continue
        checked[key] = _coerce(name, key, value, defaults[key])
    return checked


class ConfigManager:
    """Loads, validates and saves the pipeline settings."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding the section files, or None for ~/.config/musica

        Raises:
            ValueError: If a section file holds a value of the wrong type
        """
        if config_dir is None:
            config_dir = os.path.join(os.path.expanduser("~"), ".config", "musica")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.configs: Dict[str, Dict[str, Any]] = {
            name: self.load_config(name) for name in DEFAULT_CONFIGS
        }

    def _section_file(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str) -> Dict[str, Any]:
        """Read one section, writing its defaults first if the file is missing.

        Unreadable or malformed JSON falls back to the defaults. Values of the
        wrong type are not silently replaced.

        Args:
            name: Section name

        Returns:
            The full section, missing keys filled in from the defaults

        Raises:
            ValueError: If the file holds a value of the wrong type
        """
        config = dict(DEFAULT_CONFIGS[name])
        config_file = self._section_file(name)

        if not config_file.exists():
            self.save_config(name, config)
            return config

        try:
            with open(config_file, "r") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return config

        if not isinstance(stored, dict):
            logger.error(f"Ignoring {config_file}: top-level JSON value is not an object")
            return config

        try:
            config.update(validate_section(name, stored))
        except ValueError as e:
            raise ValueError(f"Invalid configuration in {config_file}: {e}") from e

        logger.info(f"Loaded configuration from {config_file}")
        return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write a section to its file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self._section_file(name)
        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

        logger.info(f"Saved configuration to {config_file}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """Return a copy of a section, or an empty dict for an unknown name."""
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Apply ``updates`` to a section and save it.

        Args:
            name: Section name
            updates: New values, checked like values read from disk

        Returns:
            True if updated and saved, False for an unknown section or a failed write

        Raises:
            ValueError: If a value has the wrong type
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(validate_section(name, updates))
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Restore a section's defaults and save it."""
        if name not in DEFAULT_CONFIGS:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = dict(DEFAULT_CONFIGS[name])
        return self.save_config(name, self.configs[name])

"""Main entry point for the Musica CLI."""

import argparse
import sys
import time
from typing import List, Optional

from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import NoteEvent
from ..core.config import ConfigManager
from ..core.factory import ComponentFactory

logger = get_logger(__name__)


class ConsoleDisplay:
    """Prints the note of every processed block."""

    def __init__(self, changes_only: bool = False, stream=None):
        self._changes_only = changes_only
        self._stream = stream or sys.stdout
        self._last_label: Optional[str] = None

    def __call__(self, event: NoteEvent) -> None:
        if self._changes_only and event.label == self._last_label:
            return
        self._last_label = event.label
        print(f"Current Note: {event.label}", file=self._stream, flush=True)


def _add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cutoff", type=float, default=None, help="Low-pass cutoff in Hz (default: 1000)"
    )
    parser.add_argument(
        "--order", type=int, default=None, help="Number of filter taps (default: 64)"
    )
    parser.add_argument(
        "--block-size", type=int, default=None, help="Samples per analysed block (default: 4096)"
    )
    parser.add_argument(
        "--flats", action="store_true", help="Use flat notes instead of sharps"
    )
    parser.add_argument(
        "--fold-mirror",
        action="store_true",
        help="Only search spectral bins up to Nyquist",
    )
    parser.add_argument(
        "--changes-only", action="store_true", help="Only print when the note changes"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def _detector_overrides(parsed_args) -> dict:
    overrides = {}
    if parsed_args.cutoff is not None:
        overrides["cutoff_frequency"] = parsed_args.cutoff
    if parsed_args.order is not None:
        overrides["order"] = parsed_args.order
    if parsed_args.flats:
        overrides["use_flats"] = True
    if parsed_args.fold_mirror:
        overrides["fold_mirror"] = True
    return overrides


def _input_overrides(parsed_args) -> dict:
    if parsed_args.block_size is not None:
        return {"frames_per_buffer": parsed_args.block_size}
    return {}


def run_listen(factory: ComponentFactory, parsed_args) -> int:
    """Detect notes from a live input device until the duration elapses or Ctrl-C."""
    audio_input = factory.create_audio_input(
        device_id=parsed_args.device, **_input_overrides(parsed_args)
    )
    overrides = _detector_overrides(parsed_args)
    service = factory.create_note_detection_service(
        audio_input=audio_input,
        detector_factory=lambda sample_rate: factory.create_note_detector(
            sample_rate=sample_rate, **overrides
        ),
    )

    if not service.start(ConsoleDisplay(parsed_args.changes_only)):
        print("Could not start audio capture", file=sys.stderr)
        return 1

    try:
        start_time = time.time()
        while parsed_args.duration is None or time.time() - start_time < parsed_args.duration:
            time.sleep(0.1)
    except KeyboardInterrupt:
        print("\nStopped by user")
    finally:
        service.stop()
    return 0


def run_analyze(factory: ComponentFactory, parsed_args) -> int:
    """Detect notes in an audio file, one line per block."""
    audio_input = factory.create_audio_input(
        "file", file_path=parsed_args.file, realtime=False, **_input_overrides(parsed_args)
    )
    overrides = _detector_overrides(parsed_args)
    service = factory.create_note_detection_service(
        audio_input=audio_input,
        detector_factory=lambda sample_rate: factory.create_note_detector(
            sample_rate=sample_rate, **overrides
        ),
    )

    if not service.start(ConsoleDisplay(parsed_args.changes_only)):
        return 1
    audio_input.wait()
    service.stop()
    return 0


def run_devices() -> int:
    """Print the available input devices."""
    from ..audio.audio_input import list_input_devices

    devices = list_input_devices()
    if not devices:
        print("No audio input devices found")
        return 1

    print("Available input devices:")
    print("-" * 70)
    for device in devices:
        rates = ", ".join(str(rate) for rate in device["supported_rates"]) or "none"
        print(f"Device {device['id']}: {device['name']}")
        print(f"  Max input channels: {device['max_input_channels']}")
        print(f"  Default sample rate: {device['default_samplerate']} Hz")
        print(f"  Supported rates: {rates}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="musica", description="Musica - real-time note detection"
    )
    parser.add_argument(
        "--config-dir", default=None, help="Configuration directory (default: ~/.config/musica)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    listen_parser = subparsers.add_parser("listen", help="Detect notes from an input device")
    listen_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID"
    )
    listen_parser.add_argument(
        "--duration", type=float, default=None, help="Seconds to listen (default: until Ctrl-C)"
    )
    _add_pipeline_arguments(listen_parser)

    analyze_parser = subparsers.add_parser("analyze", help="Detect notes in an audio file")
    analyze_parser.add_argument("file", help="Path of the audio file")
    _add_pipeline_arguments(analyze_parser)

    subparsers.add_parser("devices", help="List audio input devices")
    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    setup_logging("DEBUG" if getattr(parsed_args, "debug", False) else None)

    if parsed_args.command == "devices":
        return run_devices()

    try:
        factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
        if parsed_args.command == "listen":
            return run_listen(factory, parsed_args)
        return run_analyze(factory, parsed_args)
    except (ValueError, RuntimeError) as e:
        logger.error(f"{parsed_args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

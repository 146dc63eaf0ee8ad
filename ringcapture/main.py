"""Command-line entry point for ringcapture."""

import sys
import signal
import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .audio.capture import PyAudioCaptureSource
from .config import RingCaptureConfig
from .exceptions import RingCaptureError
from .services.recording_service import RecordingResult, RecordingService

logger = logging.getLogger(__name__)


def setup_logging(config: RingCaptureConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/ringcapture.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("ringcapture starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def print_summary(console: Console, result: RecordingResult) -> None:
    info = result.info
    table = Table(title=f"Session {info.session_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("File", result.audio_path)
    table.add_row("Format", f"{info.sample_rate}Hz, {info.channels}ch, 16-bit PCM")
    table.add_row("Frames", str(info.frame_count))
    table.add_row("Duration", f"{info.duration_seconds:.3f}s (requested {info.requested_duration_seconds:.3f}s)")
    table.add_row("Stopped by", info.stop_reason or "-")
    table.add_row("Size", f"{info.file_size_bytes} bytes")
    if info.truncated:
        table.add_row("Truncated", "[yellow]yes[/yellow]")
    console.print(table)


def main() -> None:
    """Main entry point for ringcapture."""
    parser = argparse.ArgumentParser(
        description="Record a microphone session through a ring buffer and save it as WAV",
        epilog="Press Ctrl+C to stop recording early and keep what was captured."
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: ./ringcapture.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )
    parser.add_argument(
        "--duration",
        type=float,
        help="Session length in seconds (default: session.duration_seconds, else until Ctrl+C or max duration)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="ringcapture v0.1.0"
    )
    args = parser.parse_args()

    console = Console()
    try:
        config = RingCaptureConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(2)

    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

    source = PyAudioCaptureSource(
        chunk_size=int(config.get('audio.chunk_size', 1024)),
        device_index=config.get('audio.device_index'),
    )
    service = RecordingService(config, source)
    duration = args.duration if args.duration is not None else config.get('session.duration_seconds')

    def handle_interrupt(signum, frame):
        if service.timer is None:
            raise KeyboardInterrupt
        console.print("\nStopping...")
        service.request_stop()

    signal.signal(signal.SIGINT, handle_interrupt)

    try:
        console.print("Recording... (Ctrl+C to stop)")
        result = service.record(duration)
    except RingCaptureError as e:
        logger.error(f"Recording failed: {e}")
        console.print(f"[red]Recording failed:[/red] {e}")
        sys.exit(1)

    print_summary(console, result)


if __name__ == "__main__":
    main()

"""Main application entry point for AudioGuard."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from audioguard.audio.metrics_pub import MetricsPublisher
from audioguard.config.presets import get_preset
from audioguard.services.analysis_service import AnalysisService, AnalysisResult
from audioguard.ui.report_view import build_metrics_table, render_report

from .config import AudioGuardConfig

logger = logging.getLogger(__name__)


class Analyzer:

    def __init__(self, config_path: Optional[str] = None, log_level: str = "INFO"):
        # Load configuration
        self.config = AudioGuardConfig(config_path) if config_path else None
        setup_logging(self.config, log_level)
        self.console = Console()

    def init(self, preset_name: Optional[str] = None):
        logger.info("Initializing services...")
        self.metrics_publisher = MetricsPublisher("audio.metrics")

        if self.config:
            # Command line preset overrides config
            if preset_name:
                self.config.set('processing.quality_preset', preset_name)
            self.service = AnalysisService.from_config(self.config, publisher=self.metrics_publisher)
        else:
            self.service = AnalysisService(
                quality_preset=get_preset(preset_name or "medium"),
                publisher=self.metrics_publisher,
            )

        logger.info(f"Quality preset: {self.service.quality_preset.quality.name}")

    def run(self, input_path: str, output_path: Optional[str] = None) -> AnalysisResult:
        if output_path is None and self.config and self.config.get('storage.output_directory'):
            output_path = str(Path(self.config.get_output_directory()) / f"processed_{Path(input_path).name}")

        result = self.service.analyze_file(input_path, output_path)

        render_report(result.report, self.console)
        self.console.print(build_metrics_table("Before Processing", result.original_metrics))
        self.console.print(build_metrics_table("After Processing", result.processed_metrics))
        if result.stopped_early:
            self.console.print("[yellow]Recording limit reached, remaining audio was not analysed[/yellow]")
        if result.output_path:
            self.console.print(f"Processed audio written to [bold]{result.output_path}[/bold]")
        return result


def setup_logging(config: Optional[AudioGuardConfig], level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path') if config else None
    console_output = config.get('logging.console_output', True) if config else True

    handlers = []

    # File handler - only if a log file is configured
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("AudioGuard starting up")
    logger.info(f"Log file: {log_file_path or 'disabled'}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main(argv=None) -> None:
    """Main entry point for AudioGuard."""
    parser = argparse.ArgumentParser(
        description="AudioGuard - Audio quality analysis and conditioning for dictation recordings",
    )

    parser.add_argument(
        "input",
        type=str,
        help="16-bit mono WAV file to analyse"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--preset",
        type=str,
        choices=["low", "medium", "high"],
        help="Quality preset (overrides config, default: medium)"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the processed audio to this WAV file"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="AudioGuard v0.1.0"
    )

    args = parser.parse_args(argv)

    try:
        analyzer = Analyzer(args.config, args.log_level)
        analyzer.init(args.preset)
        analyzer.run(args.input, args.output)
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

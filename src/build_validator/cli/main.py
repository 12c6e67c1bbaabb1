"""Main CLI interface for the build validator."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..config.constants import DEFAULT_EXECUTABLE, DEFAULT_OUTPUT_DIR, EXIT_FAILURE, EXIT_INTERRUPTED
from ..core import BuildValidator, ConfigManager, Reporter, RunOptions, SubprocessRunner

LOG = logging.getLogger(__name__)


class BuildValidatorCLI:
    """Command-line front end for one validation run."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_manager = ConfigManager(config_path)

    @staticmethod
    def setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
        """Setup logging based on verbosity level, falling back to the configured level."""
        default = logging.getLevelName(default_level.upper())
        if not isinstance(default, int):
            default = logging.WARNING

        level_map = {
            0: default,
            1: logging.INFO,
            2: logging.DEBUG,
        }

        level = level_map.get(verbosity, logging.DEBUG)

        log_format = "%(levelname)s: %(name)s: %(message)s" if verbosity >= 2 else "%(levelname)s: %(message)s"

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)])

        # Command lines are noisy below -vv
        if verbosity < 2:
            logging.getLogger("build_validator.core.process").setLevel(logging.WARNING)

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog="ffmpeg-validate",
            description="Validate a freshly built FFmpeg executable",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Validate the default ./ffmpeg.exe, logs in ./ffmpeg-test
  ffmpeg-validate

  # Validate a Linux build with a 60 second limit per invocation
  ffmpeg-validate build/bin/ffmpeg /tmp/ffmpeg-test --timeout 60

Exit status is 0 when no check failed (skips are fine) and 1 otherwise.
            """,
        )

        parser.add_argument(
            "executable",
            nargs="?",
            type=Path,
            default=Path(DEFAULT_EXECUTABLE),
            help=f"FFmpeg executable under test (default: {DEFAULT_EXECUTABLE})",
        )
        parser.add_argument(
            "output_dir",
            nargs="?",
            type=Path,
            default=Path(DEFAULT_OUTPUT_DIR),
            help=f"Directory for capture logs and test media (default: {DEFAULT_OUTPUT_DIR})",
        )

        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info, -vv for debug)",
        )
        parser.add_argument("--config", type=Path, help="Path to configuration file")
        parser.add_argument(
            "--timeout",
            type=float,
            help="Seconds to wait for each child process (default: wait forever)",
        )
        parser.add_argument("--no-color", action="store_true", help="Disable coloured status lines")
        parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

        return parser

    @staticmethod
    def create_run_options(args: argparse.Namespace) -> RunOptions:
        """Create run options from CLI arguments."""
        return RunOptions(
            timeout=getattr(args, "timeout", None),
            color=False if getattr(args, "no_color", False) else None,
            progress=not getattr(args, "no_progress", False),
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parser = self.build_parser()
        parsed_args = parser.parse_args(args)

        if parsed_args.timeout is not None and parsed_args.timeout <= 0:
            parser.error("--timeout must be positive")

        if getattr(parsed_args, "config", None):
            self.config_manager = ConfigManager(parsed_args.config)

        self.setup_logging(parsed_args.verbose, str(self.config_manager.get_value("global_.log_level", "WARNING")))

        options = self.create_run_options(parsed_args)
        self.config_manager.apply_run_options(options)

        color = None if self.config_manager.get_value("global_.color", True) else False

        reporter = Reporter(color=color, progress=options.progress)
        runner = SubprocessRunner(timeout=self.config_manager.get_value("global_.timeout"))
        validator = BuildValidator(self.config_manager.config, runner, reporter)

        try:
            return validator.run(parsed_args.executable, parsed_args.output_dir)
        except KeyboardInterrupt:
            LOG.info("Validation cancelled by user")
            return EXIT_INTERRUPTED
        except Exception as e:
            LOG.exception(f"Unexpected error: {e}")
            return EXIT_FAILURE


def main() -> int:
    """Entry point for the CLI."""
    cli = BuildValidatorCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

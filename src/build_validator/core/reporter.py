"""Human-readable status lines, run summary and exit code."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from tqdm import tqdm

from ..config.constants import EXIT_FAILURE, EXIT_SUCCESS
from .base import CheckOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .aggregator import Totals
    from .base import Check


# ANSI colours
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
NC = "\033[0m"

PASS_MARK = "✓"
FAIL_MARK = "✗"
SKIP_MARK = "⊘"


class Reporter:
    """Prints one line per completed check and a final summary."""

    def __init__(self, stream: TextIO | None = None, *, color: bool | None = None, progress: bool = False) -> None:
        """
        Initialize reporter.

        Args:
            stream: Where status lines go (stdout by default)
            color: Force ANSI colours on or off; None colours terminals only
            progress: Show a live progress bar on stderr while checks run

        """
        self.stream = stream or sys.stdout
        if color is None:
            color = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.color = color
        self.progress = progress
        self._bar: tqdm | None = None

    def info(self, message: str) -> None:
        self._emit("INFO", GREEN, message)

    def warn(self, message: str) -> None:
        self._emit("WARN", YELLOW, message)

    def error(self, message: str) -> None:
        self._emit("ERROR", RED, message)

    def start(self, executable: Path) -> None:
        """Announce the run and open the progress bar."""
        self.info("Starting FFmpeg validation tests...")
        self.info(f"Executable: {executable}")
        if self.progress:
            # disable=None turns the bar off when stderr is not a terminal
            self._bar = tqdm(desc="🔎 Validating", unit="check", file=sys.stderr, disable=None, leave=False)

    def check_completed(self, check: Check, totals: Totals | None = None) -> None:
        """Emit the status line of a completed check."""
        if check.outcome == CheckOutcome.PASSED:
            self.info(f"{PASS_MARK} {check.name}")
        elif check.outcome == CheckOutcome.FAILED:
            suffix = f" ({check.detail})" if check.detail else ""
            self.error(f"{FAIL_MARK} {check.name}{suffix}")
        elif check.outcome == CheckOutcome.SKIPPED:
            self.warn(f"{SKIP_MARK} {check.name} (skipped: {check.skip_reason})")
        else:
            msg = f"Check '{check.name}' has no outcome yet"
            raise ValueError(msg)

        if self._bar is not None:
            self._bar.update(1)
            if totals is not None:
                self._bar.set_postfix(passed=totals.passed, failed=totals.failed, skipped=totals.skipped)

    def summary(self, totals: Totals, output_dir: Path, failed: Sequence[Check] = ()) -> None:
        """Emit the final counts, the names of failed checks and the verdict."""
        self.close()

        self.info("=== Validation Summary ===")
        self.info(f"Tests passed: {totals.passed}")
        if totals.failed > 0:
            self.error(f"Tests failed: {totals.failed}")
        else:
            self.info(f"Tests failed: {totals.failed}")
        if totals.skipped > 0:
            self.warn(f"Tests skipped: {totals.skipped}")
        else:
            self.info(f"Tests skipped: {totals.skipped}")
        self.info(f"Total tests: {totals.total}")
        for check in failed:
            self.error(f"Failed: {check.name}" + (f" ({check.detail})" if check.detail else ""))

        if totals.success:
            self.info("All tests passed! FFmpeg build appears to be working correctly.")
        else:
            self.error(f"Some tests failed. Check the logs in {output_dir}/ for details.")

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    @staticmethod
    def exit_code(totals: Totals) -> int:
        """0 when nothing failed, whatever was skipped."""
        return EXIT_SUCCESS if totals.success else EXIT_FAILURE

    def _emit(self, label: str, colour: str, message: str) -> None:
        prefix = f"{colour}[{label}]{NC}" if self.color else f"[{label}]"
        line = f"{prefix} {message}"
        if self._bar is not None:
            tqdm.write(line, file=self.stream)
        else:
            print(line, file=self.stream, flush=True)

"""Base types for build validation: checks, outcomes and run state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class CheckKind(Enum):
    """What a check exercises."""

    CAPABILITY = "capability"
    BEHAVIORAL = "behavioral"


class CheckOutcome(Enum):
    """Outcome of a single check."""

    PASSED = "pass"
    FAILED = "fail"
    SKIPPED = "skip"


class RunState(Enum):
    """Lifecycle of one validation run."""

    NOT_STARTED = "not_started"
    RESOLVING = "resolving"
    RUNNING = "running"
    REPORTING = "reporting"
    DONE = "done"


@dataclass
class Check:
    """A named unit of verification whose outcome is set exactly once."""

    name: str
    kind: CheckKind
    outcome: CheckOutcome | None = None
    skip_reason: str | None = None
    detail: str | None = None
    log_path: Path | None = None

    @property
    def completed(self) -> bool:
        """Whether an outcome has been recorded."""
        return self.outcome is not None

    def complete(self, outcome: CheckOutcome, reason: str | None = None) -> Check:
        """
        Set the outcome of this check.

        Args:
            outcome: Final outcome
            reason: Skip reason for skipped checks, failure detail otherwise

        Returns:
            The check itself, for chaining

        """
        if self.completed:
            msg = f"Check '{self.name}' already completed as {self.outcome.value}"
            raise ValueError(msg)
        if outcome == CheckOutcome.SKIPPED and not reason:
            msg = f"Skipped check '{self.name}' needs a reason"
            raise ValueError(msg)

        self.outcome = outcome
        if outcome == CheckOutcome.SKIPPED:
            self.skip_reason = reason
        else:
            self.detail = reason
        return self


@dataclass
class RunContext:
    """Process-wide state of one validation run."""

    executable_path: Path
    output_dir: Path
    passed: int = 0
    failed: int = 0
    skipped: int = 0


class ValidationError(Exception):
    """Base exception for build validation errors."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class TargetNotFoundError(ValidationError):
    """The executable under test does not exist. Fatal for the run."""


class CaptureError(ValidationError):
    """Output of a child process could not be obtained at all."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize capture error with detailed context."""
        super().__init__(message, cause=cause)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr

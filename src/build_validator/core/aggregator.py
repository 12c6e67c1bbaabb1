"""Accumulate check outcomes into monotonic counters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import CheckOutcome

if TYPE_CHECKING:
    from .base import Check, RunContext

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Totals:
    """Read-only snapshot of the run counters."""

    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    @property
    def success(self) -> bool:
        """Skips never count against a run."""
        return self.failed == 0


class ResultAggregator:
    """Records completed checks against a run context."""

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self._checks: dict[str, Check] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._checks

    @property
    def checks(self) -> list[Check]:
        """Recorded checks in completion order."""
        return list(self._checks.values())

    @property
    def totals(self) -> Totals:
        return Totals(
            passed=self.context.passed,
            failed=self.context.failed,
            skipped=self.context.skipped,
        )

    def record(self, check: Check) -> Totals:
        """
        Record the outcome of a completed check.

        Args:
            check: Check whose outcome has been set

        Returns:
            Totals after recording

        Raises:
            ValueError: If the check has no outcome or its name was already recorded

        """
        if check.outcome is None:
            msg = f"Cannot record check '{check.name}' without an outcome"
            raise ValueError(msg)
        if check.name in self._checks:
            msg = f"Check '{check.name}' was already recorded"
            raise ValueError(msg)

        self._checks[check.name] = check
        if check.outcome == CheckOutcome.PASSED:
            self.context.passed += 1
        elif check.outcome == CheckOutcome.FAILED:
            self.context.failed += 1
        else:
            self.context.skipped += 1

        LOG.debug("Recorded %s as %s", check.name, check.outcome.value)
        return self.totals

    def failed_checks(self) -> list[Check]:
        return [check for check in self._checks.values() if check.outcome == CheckOutcome.FAILED]

"""Tests for checks and result aggregation."""

from pathlib import Path

import pytest

from build_validator.core import Check, CheckKind, CheckOutcome, ResultAggregator, RunContext, Totals


@pytest.fixture
def aggregator() -> ResultAggregator:
    return ResultAggregator(RunContext(executable_path=Path("ffmpeg"), output_dir=Path("out")))


def _check(name: str, outcome: CheckOutcome, reason: str | None = None) -> Check:
    return Check(name=name, kind=CheckKind.CAPABILITY).complete(outcome, reason)


def test_check_outcome_is_set_once() -> None:
    check = Check(name="Version check", kind=CheckKind.CAPABILITY)
    assert not check.completed

    check.complete(CheckOutcome.PASSED)

    assert check.completed
    with pytest.raises(ValueError, match="already completed"):
        check.complete(CheckOutcome.FAILED)
    assert check.outcome == CheckOutcome.PASSED


def test_skip_requires_reason() -> None:
    check = Check(name="NVENC H.264 encoding", kind=CheckKind.BEHAVIORAL)

    with pytest.raises(ValueError, match="needs a reason"):
        check.complete(CheckOutcome.SKIPPED)

    check.complete(CheckOutcome.SKIPPED, "encoder not available")
    assert check.skip_reason == "encoder not available"
    assert check.detail is None


def test_failure_reason_is_stored_as_detail() -> None:
    check = _check("CUDA library linkage", CheckOutcome.FAILED, "expected acceleration library not linked")

    assert check.detail == "expected acceleration library not linked"
    assert check.skip_reason is None


def test_record_increments_exactly_one_counter(aggregator: ResultAggregator) -> None:
    aggregator.record(_check("a", CheckOutcome.PASSED))
    aggregator.record(_check("b", CheckOutcome.PASSED))
    aggregator.record(_check("c", CheckOutcome.FAILED))
    totals = aggregator.record(_check("d", CheckOutcome.SKIPPED, "no tool"))

    assert totals == Totals(passed=2, failed=1, skipped=1)
    assert totals.total == 4
    assert aggregator.context.passed == 2
    assert [check.name for check in aggregator.checks] == ["a", "b", "c", "d"]
    assert [check.name for check in aggregator.failed_checks()] == ["c"]


def test_duplicate_names_are_rejected(aggregator: ResultAggregator) -> None:
    aggregator.record(_check("h264 codec support", CheckOutcome.PASSED))

    with pytest.raises(ValueError, match="already recorded"):
        aggregator.record(_check("h264 codec support", CheckOutcome.FAILED))

    assert aggregator.totals == Totals(passed=1)


def test_incomplete_check_is_rejected(aggregator: ResultAggregator) -> None:
    with pytest.raises(ValueError, match="without an outcome"):
        aggregator.record(Check(name="pending", kind=CheckKind.CAPABILITY))

    assert aggregator.totals.total == 0
    assert "pending" not in aggregator


@pytest.mark.parametrize(
    ("totals", "success"),
    [
        (Totals(passed=10, failed=0, skipped=5), True),
        (Totals(passed=0, failed=0, skipped=0), True),
        (Totals(passed=10, failed=1, skipped=0), False),
    ],
)
def test_success_ignores_skips(totals: Totals, success: bool) -> None:
    assert totals.success is success

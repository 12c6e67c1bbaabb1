"""Tests for the capability listing cache."""

from __future__ import annotations

import pytest

from build_validator.core import CapabilityIndex, CaptureError, ProcessResult

from .fakes import FakeRunner


def test_listing_is_captured_once_per_category(target) -> None:
    fake = FakeRunner(target.executable)
    index = CapabilityIndex(fake, target)

    first = index.get("encoders")
    second = index.get("encoders")
    index.get("filters")

    assert first is second
    assert [call[-1] for call in fake.calls] == ["-encoders", "-filters"]
    assert first.contains("h264_nvenc")
    assert first.text in (target.output_dir / "listing-encoders.log").read_text(encoding="utf-8")


def test_only_stdout_is_indexed(target) -> None:
    """Configure flags in the stderr banner must not count as capabilities."""

    class BannerRunner(FakeRunner):
        def _run_executable(self, command):
            return ProcessResult(tuple(command), 0, " V....D libx264\n", "--enable-nvenc --enable-cuda\n")

    index = CapabilityIndex(BannerRunner(target.executable), target)

    assert not index.get("encoders").contains("nvenc")


def test_capture_failure_is_cached(target, capture_error: CaptureError) -> None:
    fake = FakeRunner(target.executable, errors={"-decoders": capture_error})
    index = CapabilityIndex(fake, target)

    listing = index.get("decoders")
    index.get("decoders")

    assert not listing.available
    assert not listing.contains("cuvid")
    assert listing.error == str(capture_error)
    assert len(fake.calls) == 1
    assert "timed out" in (target.output_dir / "listing-decoders.log").read_text(encoding="utf-8")


def test_nonzero_exit_still_indexes_stdout(target) -> None:
    class FailingRunner(FakeRunner):
        def _run_executable(self, command):
            return ProcessResult(tuple(command), 1, " ... scale  V->V\n", "")

    listing = CapabilityIndex(FailingRunner(target.executable), target).get("filters")

    assert listing.available
    assert listing.contains("scale")


def test_unknown_category_is_rejected(target) -> None:
    index = CapabilityIndex(FakeRunner(target.executable), target)

    with pytest.raises(ValueError, match="Unknown listing category"):
        index.get("muxers")


def test_matching_lines(target) -> None:
    listing = CapabilityIndex(FakeRunner(target.executable), target).get("decoders")

    lines = listing.matching_lines("cuvid")

    assert len(lines) == 1
    assert lines[0].startswith("V..... h264_cuvid")


def test_listing_log_keeps_stderr_of_a_dying_executable(target) -> None:
    class BrokenRunner(FakeRunner):
        def _run_executable(self, command):
            return ProcessResult(
                tuple(command), 127, "", "error while loading shared libraries: libnppc.so.12\n"
            )

    listing = CapabilityIndex(BrokenRunner(target.executable), target).get("encoders")

    assert listing.return_code == 127
    assert not listing.contains("nvenc")
    assert "libnppc.so.12" in (target.output_dir / "listing-encoders.log").read_text(encoding="utf-8")
    assert listing.missing_detail("nvenc") == "'nvenc' not in encoders listing (listing exited with code 127)"

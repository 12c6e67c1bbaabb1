"""End-to-end tests of a validation run against a scripted executable."""

from __future__ import annotations

import io

import pytest

from build_validator.config.constants import TRANSIENT_FILES
from build_validator.core import BuildValidator, Catalogue, Reporter, RunState

from .fakes import LISTINGS, FakeRunner


def _validator(config, fake, stream=None):
    return BuildValidator(config, fake, Reporter(stream or io.StringIO(), color=False))


def test_missing_executable_runs_no_checks(tmp_path, config) -> None:
    fake = FakeRunner(tmp_path / "missing")
    stream = io.StringIO()
    validator = _validator(config, fake, stream)

    exit_code = validator.run(tmp_path / "missing" / "ffmpeg.exe", tmp_path / "out")

    assert exit_code == 1
    assert fake.calls == []
    assert validator.totals.total == 0
    assert validator.state == RunState.DONE
    assert "FFmpeg executable not found at:" in stream.getvalue()
    assert "Validation Summary" not in stream.getvalue()


def test_directory_is_not_an_executable(tmp_path, config) -> None:
    validator = _validator(config, FakeRunner(tmp_path))

    assert validator.run(tmp_path, tmp_path / "out") == 1
    assert validator.totals.total == 0


def test_successful_run_with_skips_exits_zero(fake_executable, tmp_path, config) -> None:
    """No sample generator and no ldd/objdump: skips only, so the build is accepted."""
    fake = FakeRunner(fake_executable, tools={})
    stream = io.StringIO()
    validator = _validator(config, fake, stream)

    exit_code = validator.run(fake_executable, tmp_path / "out")

    totals = validator.totals
    assert exit_code == 0
    assert totals.failed == 0
    assert totals.skipped == 3
    assert totals.total == totals.passed + totals.skipped
    assert validator.exit_code == 0
    assert (tmp_path / "out" / "version.log").exists()
    output = stream.getvalue()
    assert output.splitlines()[0] == "[INFO] Starting FFmpeg validation tests..."
    assert f"Total tests: {totals.total}" in output


def test_failed_check_exits_non_zero(fake_executable, tmp_path, config, all_tools) -> None:
    fake = FakeRunner(fake_executable, tools=all_tools, listings={**LISTINGS, "-filters": " ... scale  V->V\n"})
    stream = io.StringIO()
    validator = _validator(config, fake, stream)

    exit_code = validator.run(fake_executable, tmp_path / "out")

    assert exit_code == 1
    assert validator.totals.failed == 2
    assert "[ERROR] Failed: scale_cuda filter support" in stream.getvalue()
    for name in TRANSIENT_FILES:
        assert not (tmp_path / "out" / name).exists()


def test_output_dir_creation_is_idempotent(fake_executable, tmp_path, config) -> None:
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    (output_dir / "keep.txt").write_text("previous run", encoding="utf-8")

    exit_code = _validator(config, FakeRunner(fake_executable)).run(fake_executable, output_dir)

    assert exit_code == 0
    assert (output_dir / "keep.txt").read_text(encoding="utf-8") == "previous run"


def test_validator_runs_once(fake_executable, tmp_path, config) -> None:
    validator = _validator(config, FakeRunner(fake_executable))
    validator.run(fake_executable, tmp_path / "out")

    with pytest.raises(RuntimeError, match="runs only once"):
        validator.run(fake_executable, tmp_path / "out")


def test_empty_catalogue_runs_no_checks(fake_executable, tmp_path, config) -> None:
    fake = FakeRunner(fake_executable)
    validator = BuildValidator(config, fake, Reporter(io.StringIO(), color=False), Catalogue(probes=()))

    exit_code = validator.run(fake_executable, tmp_path / "out")

    assert exit_code == 0
    assert validator.totals.total == 0
    assert fake.calls == []

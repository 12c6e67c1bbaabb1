"""Shared fixtures for the build validator tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from build_validator.config import ValidatorConfig
from build_validator.core import CaptureError, Target


@pytest.fixture
def fake_executable(tmp_path: Path) -> Path:
    """An executable file standing in for the FFmpeg build."""
    executable = tmp_path / "bin" / "ffmpeg"
    executable.parent.mkdir()
    executable.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    executable.chmod(0o755)
    return executable


@pytest.fixture
def target(fake_executable: Path, tmp_path: Path) -> Target:
    output_dir = tmp_path / "ffmpeg-test"
    output_dir.mkdir()
    return Target(executable=fake_executable, output_dir=output_dir)


@pytest.fixture
def config() -> ValidatorConfig:
    return ValidatorConfig()


@pytest.fixture
def all_tools() -> dict[str, str]:
    return {"ffmpeg": "/usr/bin/ffmpeg", "ldd": "/usr/bin/ldd", "objdump": "/usr/bin/objdump"}


@pytest.fixture
def capture_error() -> CaptureError:
    return CaptureError("ffmpeg timed out after 5.0s", command=["ffmpeg"])

"""Locate the executable under test and prepare the scratch directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .base import TargetNotFoundError, ValidationError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Target:
    """A validated executable and the scratch directory owned by the run."""

    executable: Path
    output_dir: Path

    def log_path(self, name: str) -> Path:
        """Path of a capture file inside the scratch directory."""
        return self.output_dir / name


def resolve_target(executable: Path | str, output_dir: Path | str) -> Target:
    """
    Validate the executable under test and create the scratch directory.

    Args:
        executable: Path to the executable under test
        output_dir: Scratch directory for capture files and transient media

    Returns:
        The resolved target

    Raises:
        TargetNotFoundError: If the executable does not resolve to a file
        ValidationError: If the scratch directory cannot be created

    """
    executable = Path(executable)
    output_dir = Path(output_dir)

    if not executable.is_file():
        msg = f"FFmpeg executable not found at: {executable}"
        raise TargetNotFoundError(msg, path=executable)

    if not os.access(executable, os.X_OK):
        LOG.warning("Executable %s is not marked executable, its probes will likely fail", executable)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create output directory {output_dir}: {e}"
        raise ValidationError(msg, path=output_dir, cause=e) from e

    return Target(executable=executable.absolute(), output_dir=output_dir)

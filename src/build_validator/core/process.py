"""Child process execution for the executable under test and host tools."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import psutil

from .base import CaptureError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Captured result of a finished child process."""

    command: tuple[str, ...]
    return_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Whether the process exited with status 0."""
        return self.return_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, the way a shell `> log 2>&1` sees it."""
        if self.stdout and self.stderr:
            separator = "" if self.stdout.endswith("\n") else "\n"
            return f"{self.stdout}{separator}{self.stderr}"
        return self.stdout or self.stderr

    def write_log(self, log_path: Path) -> Path:
        """Write the combined output to a capture file."""
        log_path.write_text(self.output, encoding="utf-8")
        return log_path


class ProcessRunner(ABC):
    """Invokes external programs and captures what they print."""

    @abstractmethod
    def run(self, command: Sequence[str], *, timeout: float | None = None) -> ProcessResult:
        """
        Run a command to completion.

        Raises:
            CaptureError: If the process could not be started or did not finish
                within the timeout.

        """

    @abstractmethod
    def which(self, program: str) -> str | None:
        """Resolve a program name on the host, or return None."""


class SubprocessRunner(ProcessRunner):
    """Process runner backed by subprocess, with optional timeouts."""

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize runner with a default timeout (None waits forever)."""
        self.timeout = timeout

    def which(self, program: str) -> str | None:
        return shutil.which(program)

    def run(self, command: Sequence[str], *, timeout: float | None = None) -> ProcessResult:
        """Run a command, capturing stdout and stderr separately."""
        command = [str(part) for part in command]
        effective_timeout = timeout if timeout is not None else self.timeout

        LOG.debug("Running command: %s", " ".join(command))
        start_time = time.time()

        try:
            process = subprocess.Popen(  # noqa: S603
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            msg = f"Could not start {command[0]}: {e}"
            raise CaptureError(msg, command=command, cause=e) from e

        try:
            stdout, stderr = process.communicate(timeout=effective_timeout)
        except subprocess.TimeoutExpired as e:
            _kill_process_tree(process.pid)
            process.communicate()
            msg = f"{command[0]} timed out after {effective_timeout}s"
            raise CaptureError(msg, command=command, cause=e) from e

        LOG.debug("Command exited with %d in %.2fs", process.returncode, time.time() - start_time)
        return ProcessResult(
            command=tuple(command),
            return_code=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
        )


def _kill_process_tree(pid: int) -> None:
    """Kill a process and every child it spawned."""
    try:
        parent = psutil.Process(pid)
        children = parent.children(recursive=True)
    except psutil.NoSuchProcess:
        return

    for proc in [*children, parent]:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            LOG.debug("Process %d already exited", proc.pid)

    _, alive = psutil.wait_procs([*children, parent], timeout=5)
    for proc in alive:
        LOG.warning("Process %d survived kill", proc.pid)

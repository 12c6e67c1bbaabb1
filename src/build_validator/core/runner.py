"""Execute the check catalogue against the executable under test."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..config.constants import (
    ACCEL_OUTPUT,
    CPU_OUTPUT,
    DEPENDENCIES_LOG,
    OBJDUMP_LIBRARY_MARKERS,
    SAMPLE_INPUT,
    SAMPLE_LOG,
    TRANSIENT_FILES,
)
from .base import CaptureError, Check, CheckKind, CheckOutcome
from .capabilities import CapabilityIndex
from .catalogue import CommandProbe, LinkageProbe, ListingGroupProbe, ListingProbe, TranscodeProbe

if TYPE_CHECKING:
    from collections.abc import Callable

    from .aggregator import ResultAggregator, Totals
    from .catalogue import Catalogue, Probe
    from .process import ProcessRunner
    from .reporter import Reporter
    from .resolver import Target

LOG = logging.getLogger(__name__)

SKIP_NO_SAMPLE_TOOL = "no tool to generate test media"
SKIP_SAMPLE_FAILED = "failed to generate test media"
SKIP_ENCODER_MISSING = "encoder not available"
SKIP_DEVICE = "incompatible device or driver"
SKIP_NO_INTROSPECTION = "introspection tool not available"
FAIL_NOT_LINKED = "expected acceleration library not linked"
FAIL_NO_DEPENDENCIES = "could not analyze dependencies"


def probe_check_names(probe: Probe) -> list[str]:
    """Names of every check a probe can record, in order."""
    if isinstance(probe, (CommandProbe, ListingProbe)):
        return [probe.name]
    if isinstance(probe, ListingGroupProbe):
        return [probe.check_name(token) for token in probe.tokens]
    if isinstance(probe, TranscodeProbe):
        return [probe.cpu_name, probe.accel_name]
    if isinstance(probe, LinkageProbe):
        return [probe.linkage_name, probe.analysis_name]
    msg = f"Unknown probe type: {type(probe).__name__}"
    raise TypeError(msg)


class CheckRunner:
    """
    Runs every probe of a catalogue, in order, exactly once.

    A probe that blows up is converted into failed checks; nothing a single
    probe does can stop the remaining probes from running.
    """

    def __init__(
        self,
        target: Target,
        runner: ProcessRunner,
        aggregator: ResultAggregator,
        reporter: Reporter | None = None,
    ) -> None:
        self.target = target
        self.runner = runner
        self.aggregator = aggregator
        self.reporter = reporter
        self.index = CapabilityIndex(runner, target)
        self._handlers: dict[type, Callable[[Probe], None]] = {
            CommandProbe: self._run_command,
            ListingProbe: self._run_listing,
            ListingGroupProbe: self._run_listing_group,
            TranscodeProbe: self._run_transcode,
            LinkageProbe: self._run_linkage,
        }

    @property
    def executable(self) -> str:
        return str(self.target.executable)

    def run(self, catalogue: Catalogue) -> Totals:
        """Execute the whole catalogue and return the final totals."""
        for probe in catalogue:
            if probe.announce and self.reporter is not None:
                self.reporter.info(probe.announce)

            handler = self._handlers.get(type(probe))
            try:
                if handler is None:
                    msg = f"No handler for probe type {type(probe).__name__}"
                    raise TypeError(msg)
                handler(probe)
            except Exception as e:
                LOG.exception("Probe %s crashed", type(probe).__name__)
                self._fail_remaining(probe, e)

        return self.aggregator.totals

    def _complete(
        self,
        name: str,
        kind: CheckKind,
        outcome: CheckOutcome,
        reason: str | None = None,
        log_path: Path | None = None,
    ) -> Check:
        check = Check(name=name, kind=kind, log_path=log_path).complete(outcome, reason)
        totals = self.aggregator.record(check)
        if self.reporter is not None:
            self.reporter.check_completed(check, totals)
        return check

    def _pass_or_fail(
        self, name: str, kind: CheckKind, passed: bool, detail: str | None = None, log_path: Path | None = None
    ) -> Check:
        if passed:
            return self._complete(name, kind, CheckOutcome.PASSED, log_path=log_path)
        return self._complete(name, kind, CheckOutcome.FAILED, detail, log_path=log_path)

    def _fail_remaining(self, probe: Probe, error: Exception) -> None:
        kind = CheckKind.BEHAVIORAL if isinstance(probe, TranscodeProbe) else CheckKind.CAPABILITY
        try:
            names = probe_check_names(probe)
        except TypeError:
            names = [type(probe).__name__]
        for name in names:
            if name not in self.aggregator:
                self._complete(name, kind, CheckOutcome.FAILED, f"internal error: {error}")

    # Capability probes

    def _run_command(self, probe: CommandProbe) -> None:
        log_path = self.target.log_path(probe.log_name)
        try:
            result = self.runner.run([self.executable, *probe.args])
        except CaptureError as e:
            log_path.write_text(f"{e}\n", encoding="utf-8")
            self._complete(probe.name, CheckKind.CAPABILITY, CheckOutcome.FAILED, str(e), log_path)
            return

        result.write_log(log_path)
        self._pass_or_fail(
            probe.name, CheckKind.CAPABILITY, result.ok, f"exit code {result.return_code}", log_path
        )

    def _run_listing(self, probe: ListingProbe) -> None:
        listing = self.index.get(probe.category)
        if not listing.available:
            self._complete(probe.name, CheckKind.CAPABILITY, CheckOutcome.FAILED, listing.error, listing.log_path)
            return

        found = listing.contains(probe.token)
        log_path = listing.log_path
        if found and probe.match_log_name:
            log_path = self.target.log_path(probe.match_log_name)
            lines = [f"  - {line}" for line in listing.matching_lines(probe.token)]
            log_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

        self._pass_or_fail(
            probe.name, CheckKind.CAPABILITY, found, listing.missing_detail(probe.token), log_path
        )

    def _run_listing_group(self, probe: ListingGroupProbe) -> None:
        listing = self.index.get(probe.category)
        for token in probe.tokens:
            name = probe.check_name(token)
            if not listing.available:
                self._complete(name, CheckKind.CAPABILITY, CheckOutcome.FAILED, listing.error, listing.log_path)
                continue
            self._pass_or_fail(
                name,
                CheckKind.CAPABILITY,
                listing.contains(token),
                listing.missing_detail(token),
                listing.log_path,
            )

    # Behavioural probes

    def _run_transcode(self, probe: TranscodeProbe) -> None:
        tool = self.runner.which(probe.sample_tool)
        if tool is None:
            LOG.info("Sample generator %s not found on PATH", probe.sample_tool)
            self._skip_transcode(probe, SKIP_NO_SAMPLE_TOOL)
            return

        sample = self.target.output_dir / SAMPLE_INPUT
        try:
            if not self._generate_sample(tool, probe, sample):
                self._skip_transcode(probe, SKIP_SAMPLE_FAILED)
                return

            self._transcode_cpu(probe, sample)
            self._transcode_accel(probe, sample)
        finally:
            self._cleanup_transient()

    def _skip_transcode(self, probe: TranscodeProbe, reason: str) -> None:
        for name in (probe.cpu_name, probe.accel_name):
            self._complete(name, CheckKind.BEHAVIORAL, CheckOutcome.SKIPPED, reason)

    def _generate_sample(self, tool: str, probe: TranscodeProbe, sample: Path) -> bool:
        command = [tool, "-f", "lavfi", "-i", probe.sample_source, "-pix_fmt", "yuv420p", str(sample), "-y"]
        log_path = self.target.log_path(SAMPLE_LOG)
        try:
            result = self.runner.run(command)
        except CaptureError as e:
            LOG.warning("Sample generation failed: %s", e)
            log_path.write_text(f"{e}\n", encoding="utf-8")
            return False

        result.write_log(log_path)
        if not result.ok:
            LOG.warning("Sample generation exited with %d", result.return_code)
        return result.ok

    def _transcode(
        self, sample: Path, args: tuple[str, ...], output_name: str, log_name: str
    ) -> tuple[bool, str, Path]:
        """Run one transcode; returns (succeeded, failure detail, log path)."""
        output = self.target.output_dir / output_name
        log_path = self.target.log_path(log_name)
        command = [self.executable, "-i", str(sample), *args, str(output), "-y"]
        try:
            result = self.runner.run(command)
        except CaptureError as e:
            log_path.write_text(f"{e}\n", encoding="utf-8")
            raise

        result.write_log(log_path)
        return result.ok, f"exit code {result.return_code}", log_path

    def _transcode_cpu(self, probe: TranscodeProbe, sample: Path) -> None:
        try:
            ok, detail, log_path = self._transcode(sample, probe.cpu_args, CPU_OUTPUT, "transcode-cpu.log")
        except CaptureError as e:
            self._complete(probe.cpu_name, CheckKind.BEHAVIORAL, CheckOutcome.FAILED, str(e))
            return
        self._pass_or_fail(probe.cpu_name, CheckKind.BEHAVIORAL, ok, detail, log_path)

    def _transcode_accel(self, probe: TranscodeProbe, sample: Path) -> None:
        if not self.index.get("encoders").contains(probe.accel_encoder):
            self._complete(probe.accel_name, CheckKind.BEHAVIORAL, CheckOutcome.SKIPPED, SKIP_ENCODER_MISSING)
            return

        try:
            ok, _, log_path = self._transcode(sample, probe.accel_args, ACCEL_OUTPUT, "transcode-accel.log")
        except CaptureError as e:
            self._complete(probe.accel_name, CheckKind.BEHAVIORAL, CheckOutcome.FAILED, str(e))
            return

        # The encoder is compiled in; a failure here says the host has no usable device.
        if ok:
            self._complete(probe.accel_name, CheckKind.BEHAVIORAL, CheckOutcome.PASSED, log_path=log_path)
        else:
            self._complete(probe.accel_name, CheckKind.BEHAVIORAL, CheckOutcome.SKIPPED, SKIP_DEVICE, log_path)

    def _cleanup_transient(self) -> None:
        for name in TRANSIENT_FILES:
            path = self.target.output_dir / name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                LOG.warning("Failed to remove %s: %s", path, e)

    # Dependency linkage

    def _run_linkage(self, probe: LinkageProbe) -> None:
        tools = [(name, self.runner.which(name)) for name in probe.tools]
        tools = [(name, path) for name, path in tools if path is not None]
        if not tools:
            self._complete(probe.analysis_name, CheckKind.CAPABILITY, CheckOutcome.SKIPPED, SKIP_NO_INTROSPECTION)
            return

        log_path = self.target.log_path(DEPENDENCIES_LOG)
        libraries = self._capture_dependencies(tools, log_path)
        if libraries is None:
            self._complete(
                probe.analysis_name, CheckKind.CAPABILITY, CheckOutcome.FAILED, FAIL_NO_DEPENDENCIES, log_path
            )
            return

        lowered = libraries.lower()
        linked = any(fragment.lower() in lowered for fragment in probe.fragments)
        self._pass_or_fail(probe.linkage_name, CheckKind.CAPABILITY, linked, FAIL_NOT_LINKED, log_path)
        self._complete(probe.analysis_name, CheckKind.CAPABILITY, CheckOutcome.PASSED, log_path=log_path)

    def _capture_dependencies(self, tools: list[tuple[str, str]], log_path: Path) -> str | None:
        """Try each introspection tool in turn; the first usable listing wins."""
        errors = []
        for name, path in tools:
            is_objdump = Path(name).name.startswith("objdump")
            command = [path, "-p", self.executable] if is_objdump else [path, self.executable]
            try:
                result = self.runner.run(command)
            except CaptureError as e:
                errors.append(str(e))
                continue

            if not result.ok:
                errors.append(f"{name} exited with {result.return_code}: {result.output.strip()}")
                continue

            if is_objdump:
                lines = [
                    line.strip()
                    for line in result.stdout.splitlines()
                    if any(marker in line for marker in OBJDUMP_LIBRARY_MARKERS)
                ]
                if not lines:
                    errors.append(f"{name} listed no linked libraries")
                    continue
                text = "\n".join(lines) + "\n"
            else:
                text = result.output

            log_path.write_text(text, encoding="utf-8")
            LOG.debug("Dependencies captured with %s", name)
            return text

        log_path.write_text("\n".join(errors) + "\n", encoding="utf-8")
        LOG.warning("Could not analyze dependencies: %s", "; ".join(errors))
        return None

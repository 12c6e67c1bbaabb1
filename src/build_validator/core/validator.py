"""One validation run, from resolving the target to the exit code."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config.constants import EXIT_FAILURE
from .aggregator import ResultAggregator, Totals
from .base import RunContext, RunState, TargetNotFoundError, ValidationError
from .catalogue import build_catalogue
from .reporter import Reporter
from .resolver import resolve_target
from .runner import CheckRunner

if TYPE_CHECKING:
    from pathlib import Path

    from ..config import ValidatorConfig
    from .catalogue import Catalogue
    from .process import ProcessRunner

LOG = logging.getLogger(__name__)


class BuildValidator:
    """Drives a run through NotStarted -> Resolving -> Running -> Reporting -> Done."""

    def __init__(
        self,
        config: ValidatorConfig,
        runner: ProcessRunner,
        reporter: Reporter | None = None,
        catalogue: Catalogue | None = None,
    ) -> None:
        self.config = config
        self.runner = runner
        self.reporter = reporter or Reporter()
        self.catalogue = catalogue if catalogue is not None else build_catalogue(config)
        self.state = RunState.NOT_STARTED
        self.aggregator: ResultAggregator | None = None
        self.exit_code: int | None = None

    @property
    def totals(self) -> Totals:
        return self.aggregator.totals if self.aggregator else Totals()

    def run(self, executable: Path | str, output_dir: Path | str) -> int:
        """
        Validate an executable.

        Args:
            executable: Path to the executable under test
            output_dir: Scratch directory for capture files

        Returns:
            Process exit code: 0 when no check failed, 1 otherwise

        """
        if self.state != RunState.NOT_STARTED:
            msg = "A BuildValidator runs only once"
            raise RuntimeError(msg)

        self.state = RunState.RESOLVING
        try:
            target = resolve_target(executable, output_dir)
        except TargetNotFoundError as e:
            self.reporter.error(str(e))
            return self._finish(EXIT_FAILURE)
        except ValidationError as e:
            LOG.error("Cannot prepare run: %s", e)
            self.reporter.error(str(e))
            return self._finish(EXIT_FAILURE)

        self.state = RunState.RUNNING
        context = RunContext(executable_path=target.executable, output_dir=target.output_dir)
        self.aggregator = ResultAggregator(context)
        check_runner = CheckRunner(target, self.runner, self.aggregator, self.reporter)

        self.reporter.start(target.executable)
        try:
            totals = check_runner.run(self.catalogue)
        finally:
            self.reporter.close()

        self.state = RunState.REPORTING
        self.reporter.summary(totals, target.output_dir, self.aggregator.failed_checks())
        return self._finish(self.reporter.exit_code(totals))

    def _finish(self, exit_code: int) -> int:
        self.state = RunState.DONE
        self.exit_code = exit_code
        LOG.debug("Validation finished with exit code %d", exit_code)
        return exit_code

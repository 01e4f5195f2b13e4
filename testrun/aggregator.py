"""Per-test reporting and the overall exit status of a run."""

import logging
import sys
from dataclasses import dataclass, field
from typing import Literal, TextIO

from testrun.display import format_status_line
from testrun.errors import ExitCode
from testrun.models.policy import ValidationPolicy
from testrun.models.result import ExecutionOutcome

log = logging.getLogger(__name__)

Decision = Literal["continue", "halt"]


@dataclass(kw_only=True)
class ResultAggregator:
    """Reports outcomes as they arrive and tracks whether any test failed."""

    policy: ValidationPolicy
    stream: TextIO = field(default_factory=lambda: sys.stderr)
    quiet: bool = False
    color: bool = True
    any_test_failed: bool = False
    passed: int = 0
    failed: int = 0

    def record(self, outcome: ExecutionOutcome) -> Decision:
        """Report one outcome and decide whether the run goes on."""
        if not self.quiet:
            print(format_status_line(outcome, color=self.color), file=self.stream)
            self.stream.flush()

        if outcome.succeeded:
            self.passed += 1
            return "continue"

        self.failed += 1
        self.any_test_failed = True
        if self.policy.halts("test_failed"):
            log.info("Halting after failed test %s", outcome.display_path)
            return "halt"
        return "continue"

    def final_exit_code(self) -> ExitCode:
        """Log the pass/fail summary and return the exit status of the run."""
        log.info("%d passed, %d failed", self.passed, self.failed)
        if self.any_test_failed:
            return ExitCode.TESTS_FAILED
        return ExitCode.SUCCESS

"""Models for test execution results."""

from dataclasses import dataclass
from typing import Literal

from testrun.models.spec import TestSpec


@dataclass(frozen=True, kw_only=True)
class ExecutionOutcome:
    """Result of running a single test file.

    ``exit_code`` is None when the file could not be invoked at all, in which
    case ``message`` holds the reason.
    """

    spec: TestSpec
    exit_code: int | None
    display_path: str
    message: str | None = None

    @property
    def status(self) -> Literal["success", "failure", "error"]:
        """Classify the outcome by its exit code."""
        if self.exit_code is None:
            return "error"
        return "success" if self.exit_code == 0 else "failure"

    @property
    def succeeded(self) -> bool:
        """Whether the test ran and exited 0."""
        return self.status == "success"

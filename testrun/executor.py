"""Sequential execution of resolved test files."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable, Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from testrun.models.result import ExecutionOutcome
from testrun.models.spec import TestSpec
from testrun.stdin_fork import ForkedStdin

log = logging.getLogger(__name__)

SilenceMode = Literal["1", "2", "b"]


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs test files one at a time with shared parameters and stdin."""

    __test__ = False

    params: Sequence[str] = ()
    stdin: ForkedStdin | None = None
    silence: SilenceMode | None = None
    cwd: Path | None = None
    format_path: Callable[[Path], str] = str

    async def run(
        self, specs: Iterable[TestSpec]
    ) -> AsyncGenerator[ExecutionOutcome, None]:
        """Run tests in order, yielding each outcome as soon as the test exits.

        The next test is only started once the consumer asks for the next
        outcome, so stopping iteration stops the run.
        """
        for spec in specs:
            yield await self.run_one(spec)

    async def run_one(self, spec: TestSpec) -> ExecutionOutcome:
        """Run a single test file and wait for it to exit."""
        display_path = self.format_path(spec.path)
        log.debug("Running %s with %d param(s)", display_path, len(self.params))

        with ExitStack() as stack:
            stdin = stack.enter_context(self.stdin.open()) if self.stdin else None
            try:
                process = await asyncio.create_subprocess_exec(
                    str(spec.path),
                    *self.params,
                    stdin=stdin,
                    stdout=asyncio.subprocess.DEVNULL
                    if self.silence in {"1", "b"}
                    else None,
                    stderr=asyncio.subprocess.DEVNULL
                    if self.silence in {"2", "b"}
                    else None,
                    cwd=self.cwd,
                )
            except OSError as exc:
                log.debug("Could not invoke %s", spec.path, exc_info=exc)
                return ExecutionOutcome(
                    spec=spec,
                    exit_code=None,
                    display_path=display_path,
                    message=exc.strerror or str(exc),
                )
            returncode = await process.wait()

        return ExecutionOutcome(
            spec=spec,
            exit_code=normalize_exit_code(returncode),
            display_path=display_path,
        )


def normalize_exit_code(returncode: int) -> int:
    """Map a child killed by signal N (returncode -N) to the shell's 128 + N."""
    return returncode if returncode >= 0 else 128 - returncode

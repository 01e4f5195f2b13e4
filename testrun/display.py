"""Formatting of test paths, dry-run lines and status lines for the user."""

import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Literal

from testrun.models.result import ExecutionOutcome

PathOutputMode = Literal["absolute", "local", "tests-root"]

RESET = "\033[0m"

STATUS_COLORS: Mapping[str, str] = {
    "success": "\033[32m",
    "failure": "\033[31m",
    "error": "\033[31m",
}


def format_display_path(
    path: Path,
    mode: PathOutputMode,
    invocation_dir: Path,
    tests_root: Path | None = None,
) -> str:
    """Return the string shown to the user for a test path.

    Paths outside the base directory of the selected mode are shown
    unchanged, never with ``../`` components. The result is for display
    only and may be ambiguous.
    """
    if mode == "local":
        if _is_inside(path, invocation_dir):
            return f"./{path.relative_to(invocation_dir)}"
    elif mode == "tests-root":
        if tests_root is not None and _is_inside(path, tests_root):
            return str(path.relative_to(tests_root))
    return str(path)


def format_dry_run_line(display_path: str, params: Sequence[str]) -> str:
    """Shell-escape a test path and its parameters into one line."""
    return " ".join(shlex.quote(part) for part in (display_path, *params))


def format_status_line(outcome: ExecutionOutcome, *, color: bool = True) -> str:
    """Render the per-test status line, e.g. ``[3] ./tests/test-lasers``."""
    if outcome.exit_code is None:
        marker = "[ERR]"
    else:
        marker = f"[{outcome.exit_code}]"

    if color:
        marker = f"{STATUS_COLORS[outcome.status]}{marker}{RESET}"

    line = f"{marker} {shlex.quote(outcome.display_path)}"
    if outcome.message:
        line = f"{line}: {outcome.message}"
    return line


def _is_inside(path: Path, directory: Path) -> bool:
    return path != directory and path.is_relative_to(directory)

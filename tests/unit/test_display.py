"""Tests for display formatting."""

from pathlib import Path

import pytest

from testrun.display import (
    format_display_path,
    format_dry_run_line,
    format_status_line,
)
from testrun.testing.factories import OutcomeFactory

TEST_PATH = Path("/work/project/tests/unit/test-lasers")


class TestFormatDisplayPath:
    """Tests for format_display_path."""

    def test_absolute_mode_returns_path_unchanged(self) -> None:
        """Returns the absolute path."""
        result = format_display_path(TEST_PATH, "absolute", Path("/work/project"))

        assert result == "/work/project/tests/unit/test-lasers"

    @pytest.mark.parametrize(
        ("invocation_dir", "expected"),
        [
            ("/work/project", "./tests/unit/test-lasers"),
            ("/work/project/tests/unit", "./test-lasers"),
            ("/work/other", "/work/project/tests/unit/test-lasers"),
            ("/work/proj", "/work/project/tests/unit/test-lasers"),
        ],
    )
    def test_local_mode(self, invocation_dir: str, expected: str) -> None:
        """Prefixes ./ inside the invocation dir and never climbs out of it."""
        result = format_display_path(TEST_PATH, "local", Path(invocation_dir))

        assert result == expected

    @pytest.mark.parametrize(
        ("tests_root", "expected"),
        [
            ("/work/project/tests", "unit/test-lasers"),
            ("/work/elsewhere", "/work/project/tests/unit/test-lasers"),
            (None, "/work/project/tests/unit/test-lasers"),
        ],
    )
    def test_tests_root_mode(self, tests_root: str | None, expected: str) -> None:
        """Strips the tests root and its separator when the path is inside it."""
        result = format_display_path(
            TEST_PATH,
            "tests-root",
            Path("/work/project"),
            Path(tests_root) if tests_root else None,
        )

        assert result == expected


class TestFormatDryRunLine:
    """Tests for format_dry_run_line."""

    def test_without_params(self) -> None:
        """Prints only the path."""
        assert format_dry_run_line("./tests/test-a", []) == "./tests/test-a"

    def test_quotes_params(self) -> None:
        """Shell-escapes every parameter."""
        line = format_dry_run_line("./tests/test-a", ["-c=3", "-f", "my file", "it's"])

        assert line == "./tests/test-a -c=3 -f 'my file' 'it'\"'\"'s'"

    def test_quotes_path(self) -> None:
        """Shell-escapes the path."""
        assert format_dry_run_line("./my tests/test-a", []) == "'./my tests/test-a'"


class TestFormatStatusLine:
    """Tests for format_status_line."""

    def test_success_is_green(self) -> None:
        """Colors the exit code green on success."""
        outcome = OutcomeFactory.build(exit_code=0, display_path="./test-a")

        assert format_status_line(outcome) == "\033[32m[0]\033[0m ./test-a"

    def test_failure_is_red(self) -> None:
        """Colors the exit code red on failure."""
        outcome = OutcomeFactory.build(exit_code=3, display_path="./test-b")

        assert format_status_line(outcome) == "\033[31m[3]\033[0m ./test-b"

    def test_error_shows_message(self) -> None:
        """Marks tests that could not be invoked and appends the reason."""
        outcome = OutcomeFactory.build(
            exit_code=None,
            display_path="./test-c",
            message="No such file or directory",
        )

        line = format_status_line(outcome, color=False)

        assert line == "[ERR] ./test-c: No such file or directory"

    def test_without_color(self) -> None:
        """Leaves out escape sequences."""
        outcome = OutcomeFactory.build(exit_code=8, display_path="./my test")

        assert format_status_line(outcome, color=False) == "[8] './my test'"

"""CLI entry point for the test-execution harness."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from contextlib import ExitStack, aclosing
from functools import partial
from pathlib import Path
from typing import BinaryIO, TextIO

from testrun.aggregator import ResultAggregator
from testrun.config import DEFAULT_FIELD_SEPARATORS, RunConfig, build_config
from testrun.display import format_display_path, format_dry_run_line
from testrun.errors import ExitCode, TestRunError
from testrun.executor import TestExecutor
from testrun.models.policy import HALT_CATEGORIES
from testrun.resolver import resolve_test_specs
from testrun.stdin_fork import fork_stdin

PROG = "testrun"

EPILOG = f"""\
FILEs must be executable and begin with 'test-' (see: --any-name).
Each DIRECTORY is searched recursively for executable FILEs beginning with
'test-'. Null characters are allowed in stdin (see: --fork-stdin).

policy categories: {", ".join(HALT_CATEGORIES)}

examples:
  # Run a test file and all tests recursively in two separate directories
  {PROG} test-lasers /my/tests /my/other/tests

  # Fork stdin across all tests
  printf '%s\\n' "hello all tests" | {PROG} -F ./tests

exit status:
  0    success
  1    unmanaged error
  2    failed parameter validation
  4    failed validation of test files to be run
  8    one or more tests returned an exit code greater than 0
"""


async def run(
    config: RunConfig,
    *,
    stdin: BinaryIO,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Resolve, optionally dry-run, execute and report tests; return exit code."""
    log = logging.getLogger("testrun")

    specs = resolve_test_specs(config.paths, config.policy, config.name_prefix)
    log.info("Resolved %d test(s)", len(specs))

    format_path = partial(
        format_display_path,
        mode=config.path_output,
        invocation_dir=config.invocation_dir,
        tests_root=config.tests_root,
    )

    if config.dry_run:
        for spec in specs:
            print(format_dry_run_line(format_path(spec.path), config.params), file=stdout)
        return ExitCode.SUCCESS

    aggregator = ResultAggregator(
        policy=config.policy,
        stream=stderr,
        quiet=config.quiet,
        color=config.color,
    )

    with ExitStack() as stack:
        forked_stdin = None
        if config.fork_stdin:
            forked_stdin = stack.enter_context(fork_stdin(stdin, config.tmp_dir))

        executor = TestExecutor(
            params=config.params,
            stdin=forked_stdin,
            silence=config.silence_tests,
            cwd=config.app_root_dir,
            format_path=format_path,
        )
        async with aclosing(executor.run(specs)) as outcomes:
            async for outcome in outcomes:
                if aggregator.record(outcome) == "halt":
                    break

    return aggregator.final_exit_code()


def _halt_directive(category: str) -> tuple[str, bool]:
    return category, True


def _ignore_directive(category: str) -> tuple[str, bool]:
    return category, False


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} [OPTION]... [test-FILE]... [DIRECTORY]...",
        description="Run executable test files and report their exit codes.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="*", help="Test files and directories")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only errors and the output of tests are written",
    )
    parser.add_argument(
        "-s",
        "--silence-tests",
        choices=["1", "2", "b"],
        help="Discard test stdout (1), stderr (2) or both (b)",
    )
    parser.add_argument(
        "-p",
        "--params",
        default="",
        metavar="VAL",
        help="Separated param(s) to use with all test files, ex: -p '-c=3 -f /my/file'",
    )
    parser.add_argument(
        "--params-ifs",
        default=DEFAULT_FIELD_SEPARATORS,
        metavar="CHARS",
        help="Characters --params is split on (default: space, tab, newline)",
    )
    parser.add_argument(
        "-F",
        "--fork-stdin",
        action="store_true",
        help="Write stdin into all tests",
    )
    parser.add_argument(
        "-e",
        "--fail-exit",
        action="append_const",
        dest="policy_directives",
        const=("test_failed", True),
        help="Exit on first failed test",
    )
    parser.add_argument(
        "--halt-on",
        action="append",
        dest="policy_directives",
        type=_halt_directive,
        metavar="CATEGORY",
        help="Make a policy category fatal",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        dest="policy_directives",
        type=_ignore_directive,
        metavar="CATEGORY",
        help="Tolerate a policy category",
    )
    parser.add_argument(
        "-r",
        "--app-root-dir",
        type=Path,
        metavar="DIR",
        help="Working directory for executed tests",
    )

    path_output = parser.add_mutually_exclusive_group()
    path_output.add_argument(
        "-l",
        "--localize-path-output",
        action="store_const",
        dest="path_output",
        const="local",
        help="Show test paths relative to the current directory (default)",
    )
    path_output.add_argument(
        "-a",
        "--absolute-path-output",
        action="store_const",
        dest="path_output",
        const="absolute",
        help="Show absolute test paths",
    )
    path_output.add_argument(
        "--tests-root-path-output",
        type=Path,
        dest="tests_root",
        metavar="DIR",
        help="Show test paths relative to DIR",
    )
    parser.set_defaults(path_output="local")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the filepaths to be executed",
    )
    parser.add_argument(
        "--any-name",
        action="store_true",
        help="Don't require test file names to begin with 'test-'",
    )
    parser.add_argument(
        "--tmp-dir",
        type=Path,
        default=Path("/tmp"),
        metavar="DIR",
        help="Directory for the --fork-stdin cache file (default: /tmp)",
    )
    parser.add_argument(
        "--no-color",
        action="store_false",
        dest="color",
        help="Don't colorize status lines",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase diagnostic logging (repeatable)",
    )
    return parser


def configure_logging(verbosity: int, *, quiet: bool = False) -> None:
    """Configure root logging on stderr for the requested verbosity."""
    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _bind_params_values(argv: Sequence[str]) -> list[str]:
    """Attach the token after ``-p``/``--params`` to it, even if it starts with -."""
    bound: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            bound.extend([token, *tokens])
            break
        if token in {"-p", "--params"}:
            value = next(tokens, None)
            if value is not None:
                token = f"--params={value}"
        bound.append(token)
    return bound


def parse_args(
    parser: argparse.ArgumentParser, argv: Sequence[str]
) -> argparse.Namespace:
    """Parse options mixed with paths; everything after ``--`` is a path."""
    argv = _bind_params_values(argv)
    trailing: list[str] = []
    if "--" in argv:
        separator = argv.index("--")
        argv, trailing = argv[:separator], argv[separator + 1 :]

    args = parser.parse_intermixed_args(argv)
    args.paths = [*args.paths, *trailing]
    return args


def main() -> None:
    """CLI entry point."""
    parser = build_parser()

    if len(sys.argv) < 2:
        parser.print_help()
        sys.exit(ExitCode.SUCCESS)

    args = parse_args(parser, sys.argv[1:])
    configure_logging(args.verbose, quiet=args.quiet)

    try:
        config = build_config(args, Path.cwd())
        exit_code = asyncio.run(
            run(
                config,
                stdin=sys.stdin.buffer,
                stdout=sys.stdout,
                stderr=sys.stderr,
            )
        )
    except TestRunError as exc:
        print(f"ERROR: {PROG}, {exc}", file=sys.stderr)
        sys.exit(exc.exit_code)

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()

"""Run configuration built once from parsed command line options."""

import argparse
import re
from pathlib import Path

from pydantic import Field, ValidationError

from testrun.display import PathOutputMode
from testrun.errors import ParameterValidationError
from testrun.executor import SilenceMode
from testrun.models.base import Model
from testrun.models.policy import ValidationPolicy
from testrun.resolver import DEFAULT_NAME_PREFIX

DEFAULT_FIELD_SEPARATORS = " \t\n"


class RunConfig(Model):
    """Everything a run needs, validated up front and immutable afterwards."""

    paths: tuple[str, ...] = Field(..., description="File or directory arguments")
    invocation_dir: Path = Field(..., description="Directory the harness was run from")
    params: tuple[str, ...] = Field(
        default=(), description="Arguments passed to every test"
    )
    quiet: bool = False
    silence_tests: SilenceMode | None = None
    fork_stdin: bool = False
    dry_run: bool = False
    app_root_dir: Path | None = Field(
        default=None, description="Working directory for executed tests"
    )
    path_output: PathOutputMode = "local"
    tests_root: Path | None = None
    policy: ValidationPolicy = Field(default_factory=ValidationPolicy)
    name_prefix: str | None = DEFAULT_NAME_PREFIX
    tmp_dir: Path = Path("/tmp")
    color: bool = True


def split_params(value: str, separators: str = DEFAULT_FIELD_SEPARATORS) -> list[str]:
    """Split a parameter string on any separator character, dropping empty fields.

    >>> split_params("-c=3 -f /my/file")
    ['-c=3', '-f', '/my/file']
    """
    if not separators:
        return [value] if value else []
    return [part for part in re.split(f"[{re.escape(separators)}]", value) if part]


def build_config(args: argparse.Namespace, invocation_dir: Path) -> RunConfig:
    """Validate parsed options into a RunConfig.

    Relative directories are resolved against ``invocation_dir``.

    Raises:
        ParameterValidationError: If an option value is invalid

    """
    if not args.paths:
        raise ParameterValidationError("no test paths given")

    policy = ValidationPolicy.from_directives(args.policy_directives or ())

    app_root_dir = None
    if args.app_root_dir is not None:
        app_root_dir = (invocation_dir / args.app_root_dir).resolve()
        if not app_root_dir.is_dir():
            raise ParameterValidationError(
                f"app root directory doesnt exist: {args.app_root_dir}"
            )

    path_output = args.path_output
    tests_root = None
    if args.tests_root is not None:
        path_output = "tests-root"
        tests_root = (invocation_dir / args.tests_root).resolve()

    try:
        return RunConfig(
            paths=tuple(args.paths),
            invocation_dir=invocation_dir,
            params=tuple(split_params(args.params, args.params_ifs)),
            quiet=args.quiet,
            silence_tests=args.silence_tests,
            fork_stdin=args.fork_stdin,
            dry_run=args.dry_run,
            app_root_dir=app_root_dir,
            path_output=path_output,
            tests_root=tests_root,
            policy=policy,
            name_prefix=None if args.any_name else DEFAULT_NAME_PREFIX,
            tmp_dir=args.tmp_dir,
            color=args.color,
        )
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ParameterValidationError(errors) from exc

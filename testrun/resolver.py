"""Resolve path arguments into the ordered list of test files to run."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from testrun.errors import PathValidationError
from testrun.models.policy import HaltCategory, ValidationPolicy
from testrun.models.spec import TestSpec

log = logging.getLogger(__name__)

DEFAULT_NAME_PREFIX = "test-"


def resolve_test_specs(
    path_arguments: Sequence[str],
    policy: ValidationPolicy,
    name_prefix: str | None = DEFAULT_NAME_PREFIX,
) -> list[TestSpec]:
    """Turn file and directory arguments into test specs, in argument order.

    Directories are searched recursively. Nothing is deduplicated, so a file
    given explicitly and also found through a directory argument is returned
    twice.

    Args:
        path_arguments: File or directory paths as given by the user
        policy: Decides which anomalies abort resolution
        name_prefix: Required file name prefix, None disables the filter

    Returns:
        Test specs with absolute, symlink-resolved paths

    Raises:
        PathValidationError: On an anomaly the policy halts on, or on a file
            argument that is misnamed or not a regular file

    """
    specs: list[TestSpec] = []

    for argument in path_arguments:
        path = Path(argument)

        if not argument or not path.exists():
            _handle_anomaly(
                policy, "missing_path", f"test path does not exist: {argument}"
            )
            continue

        if not os.access(path, os.X_OK):
            _handle_anomaly(
                policy, "not_executable", f"test path is not executable: {argument}"
            )
            continue

        if path.is_dir():
            found = find_tests_in_directory(path, name_prefix)
            log.debug("Found %d test(s) in %s", len(found), argument)
            specs.extend(found)
            continue

        if name_prefix and not path.name.startswith(name_prefix):
            raise PathValidationError(
                f"test files must begin with {name_prefix}: {argument}"
            )
        if not path.is_file():
            raise PathValidationError(f"test path is not a regular file: {argument}")

        log.debug("Discovered test %s", argument)
        specs.append(TestSpec(path=path.resolve()))

    if not specs:
        _handle_anomaly(policy, "no_tests_found", "no tests to execute")

    return specs


def find_tests_in_directory(
    directory: Path, name_prefix: str | None = DEFAULT_NAME_PREFIX
) -> list[TestSpec]:
    """Recursively collect executable regular files below a directory.

    Symlinked directories are not descended into. Symlinked files count when
    their target is an executable regular file. Results are ordered by their
    path components relative to ``directory``. Entries resolving to the same
    file are returned once, at their first position.
    """
    candidates: list[Path] = []

    for root, _dirnames, filenames in os.walk(directory):
        root_path = Path(root)
        for filename in filenames:
            if name_prefix and not filename.startswith(name_prefix):
                continue
            candidate = root_path / filename
            if candidate.is_file() and os.access(candidate, os.X_OK):
                candidates.append(candidate)
            else:
                log.debug("Skipping non-executable entry %s", candidate)

    candidates.sort(key=lambda candidate: candidate.relative_to(directory).parts)

    # Symlinks within the tree may point at a test already found.
    resolved = list(dict.fromkeys(candidate.resolve() for candidate in candidates))
    for path in resolved:
        log.debug("Discovered test %s", path)
    return [TestSpec(path=path) for path in resolved]


def _handle_anomaly(
    policy: ValidationPolicy, category: HaltCategory, message: str
) -> None:
    """Raise if the policy halts on ``category``, otherwise log and carry on."""
    if policy.halts(category):
        raise PathValidationError(message)
    log.debug("Ignoring %s: %s", category, message)

"""Exit statuses and the errors that abort a run."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit statuses of the harness."""

    SUCCESS = 0
    UNMANAGED = 1
    PARAMETER_VALIDATION = 2
    PATH_VALIDATION = 4
    TESTS_FAILED = 8


class TestRunError(Exception):
    """Base for fatal errors, carrying the exit status to terminate with."""

    __test__ = False

    exit_code: ExitCode = ExitCode.UNMANAGED


class UnmanagedError(TestRunError):
    """Raised when an environment precondition is unmet."""

    exit_code = ExitCode.UNMANAGED


class ParameterValidationError(TestRunError):
    """Raised for malformed option values or unknown policy categories."""

    exit_code = ExitCode.PARAMETER_VALIDATION


class PathValidationError(TestRunError):
    """Raised when a test path fails validation and policy says to halt."""

    exit_code = ExitCode.PATH_VALIDATION

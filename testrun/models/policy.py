"""Halt/ignore policy for anomalies found while resolving and running tests."""

from collections.abc import Iterable
from typing import Literal, get_args

from pydantic import Field

from testrun.errors import ParameterValidationError
from testrun.models.base import Model

HaltCategory = Literal["missing_path", "not_executable", "no_tests_found", "test_failed"]

HALT_CATEGORIES: tuple[HaltCategory, ...] = get_args(HaltCategory)


class ValidationPolicy(Model):
    """Which anomaly categories abort the run and which are tolerated."""

    missing_path: bool = Field(
        default=True, description="Halt when a path argument does not exist"
    )
    not_executable: bool = Field(
        default=False, description="Halt when a path argument is not executable"
    )
    no_tests_found: bool = Field(
        default=True, description="Halt when resolution yields zero tests"
    )
    test_failed: bool = Field(
        default=False, description="Halt on the first test exiting nonzero"
    )

    def halts(self, category: HaltCategory) -> bool:
        """Return whether an anomaly of the given category is fatal."""
        return bool(getattr(self, category))

    @classmethod
    def from_directives(
        cls, directives: Iterable[tuple[str, bool]]
    ) -> "ValidationPolicy":
        """Build a policy from the defaults and ordered ``(category, halt)`` pairs.

        Directives are applied in order, so the last one given for a category
        wins.

        Raises:
            ParameterValidationError: If a category name is unknown

        """
        overrides: dict[str, bool] = {}
        for category, halt in directives:
            normalized = category.strip().replace("-", "_")
            if normalized not in HALT_CATEGORIES:
                raise ParameterValidationError(
                    f"unknown category: {category} "
                    f"(expected one of: {', '.join(HALT_CATEGORIES)})"
                )
            overrides[normalized] = halt
        return cls(**overrides)

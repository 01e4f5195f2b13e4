"""Test factories for generating test data."""

import uuid
from pathlib import Path

from polyfactory import Use
from polyfactory.factories import DataclassFactory

from testrun.models.result import ExecutionOutcome
from testrun.models.spec import TestSpec


class SpecFactory(DataclassFactory[TestSpec]):
    """Factory for TestSpec."""

    __model__ = TestSpec

    path = Use(lambda: Path("/work/tests") / f"test-{uuid.uuid4().hex[:8]}")


class OutcomeFactory(DataclassFactory[ExecutionOutcome]):
    """Factory for ExecutionOutcome."""

    __model__ = ExecutionOutcome

    spec = Use(SpecFactory.build)
    exit_code = 0
    message = None

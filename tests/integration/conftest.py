"""Fixtures for integration tests."""

from pathlib import Path
from typing import Protocol

import pytest


class MakeTestFn(Protocol):
    """Protocol for test file creation function."""

    def __call__(
        self, relative_path: str, body: str = "exit 0", *, executable: bool = True
    ) -> Path:
        """Create a shell script below the work directory and return its path."""


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Create a symlink-free work directory."""
    work = tmp_path / "work"
    work.mkdir()
    return work.resolve()


@pytest.fixture
def make_test(work_dir: Path) -> MakeTestFn:
    """Return a function to create executable shell scripts."""

    def _make(
        relative_path: str, body: str = "exit 0", *, executable: bool = True
    ) -> Path:
        path = work_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755 if executable else 0o644)
        return path

    return _make

"""Models for resolved test files."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class TestSpec:
    """An executable regular file selected to run as a test.

    The path is absolute and symlink-resolved. Executability is checked at
    resolution time only, the file may change before it is run.
    """

    __test__ = False

    path: Path

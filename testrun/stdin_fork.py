"""Capture the harness's stdin once so every test can read a full copy of it."""

import logging
import os
import shutil
import signal
import time
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Any, BinaryIO

from testrun.errors import UnmanagedError

log = logging.getLogger(__name__)

CACHE_FILE_PREFIX = "test-run__in_"

# Signals that would otherwise kill the process without running cleanup.
CLEANUP_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


@dataclass(frozen=True, kw_only=True)
class ForkedStdin:
    """Handle on captured stdin content."""

    path: Path

    def open(self) -> BinaryIO:
        """Open a fresh read handle positioned at the start of the content."""
        return self.path.open("rb")


def stdin_cache_path(tmp_dir: Path) -> Path:
    """Return a per-process, per-second cache file path inside ``tmp_dir``."""
    return tmp_dir / f"{CACHE_FILE_PREFIX}{os.getpid()}_{int(time.time())}"


@contextmanager
def fork_stdin(source: BinaryIO, tmp_dir: Path) -> Generator[ForkedStdin]:
    """Copy ``source`` to an owner-only temp file for the duration of the block.

    The file is removed when the block exits, including on exceptions and on
    SIGTERM/SIGHUP, which are turned into ``SystemExit`` while the block is
    active.

    Args:
        source: Binary stream read to end of stream, usually ``sys.stdin.buffer``
        tmp_dir: Existing directory to create the cache file in

    Raises:
        UnmanagedError: If the directory is missing or the file can't be created

    """
    if not tmp_dir.is_dir():
        raise UnmanagedError(f"temp directory doesnt exist: {tmp_dir}")

    path = stdin_cache_path(tmp_dir)
    previous_handlers = _exit_on_signals()
    created = False
    try:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except OSError as exc:
            raise UnmanagedError(
                f"cannot create stdin cache file {path}: {exc.strerror}"
            ) from exc
        created = True

        with os.fdopen(fd, "wb") as cache:
            shutil.copyfileobj(source, cache)
        log.debug("Captured %d byte(s) of stdin in %s", path.stat().st_size, path)

        yield ForkedStdin(path=path)
    finally:
        if created:
            path.unlink(missing_ok=True)
            log.debug("Removed stdin cache %s", path)
        _restore_handlers(previous_handlers)


def _raise_system_exit(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


def _exit_on_signals() -> Mapping[signal.Signals, Any]:
    previous: dict[signal.Signals, Any] = {}
    for signum in CLEANUP_SIGNALS:
        previous[signum] = signal.signal(signum, _raise_system_exit)
    return previous


def _restore_handlers(previous: Mapping[signal.Signals, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)

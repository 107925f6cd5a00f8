"""
Pipeline Lock
~~~~~~~~~~~~~

Advisory, process-level file lock held for the duration of a mutating
rollback pipeline so two invocations cannot interleave Passport writes
or backup directories.
"""

from __future__ import annotations

import fcntl
import logging
import os
import time
from pathlib import Path
from types import TracebackType
from typing import TextIO

from plyra_rollback.exceptions import LockError

__all__ = ["PipelineLock"]

logger = logging.getLogger(__name__)

RETRY_DELAY = 0.1  # seconds


class PipelineLock:
    """
    Exclusive ``flock`` on a lock file, usable as a context manager.

    Acquisition is retried until ``timeout`` seconds have passed, then
    ``LockError`` is raised. The lock file records the holder's PID.
    """

    def __init__(self, path: str | os.PathLike[str], timeout: float = 2.0) -> None:
        self._path = Path(path)
        self._timeout = timeout
        self._handle: TextIO | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Take the lock or raise ``LockError``."""
        if self._handle is not None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self._path, "a+", encoding="utf-8")
        except OSError as exc:
            raise LockError(f"Cannot open lock file {self._path}: {exc}") from exc

        deadline = time.monotonic() + self._timeout
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    handle.close()
                    raise LockError(
                        f"another rollback is in progress (lock held on {self._path})",
                        details={"lock_path": str(self._path)},
                    ) from None
                time.sleep(RETRY_DELAY)

        handle.seek(0)
        handle.truncate()
        handle.write(f"{os.getpid()}\n")
        handle.flush()
        self._handle = handle
        logger.debug("Acquired pipeline lock %s", self._path)

    def release(self) -> None:
        """Release the lock if held. The lock file itself is left in place."""
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
        logger.debug("Released pipeline lock %s", self._path)

    def __enter__(self) -> PipelineLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

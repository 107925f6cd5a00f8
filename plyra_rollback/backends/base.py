"""
Base Backends
~~~~~~~~~~~~~

Abstract capabilities the pipeline consumes: a version-control revert
primitive and a test-runner primitive. Real variants shell out; mock
variants are deterministic.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

__all__ = ["CommandResult", "RevertBackend", "TestBackend", "run_command"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of an external command.

    Attributes:
        exit_status: Process exit code, or None if it was killed on timeout.
        output: Combined stdout and stderr.
        duration_ms: Wall-clock run time in milliseconds.
    """

    exit_status: int | None
    output: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    @property
    def timed_out(self) -> bool:
        return self.exit_status is None


def run_command(
    argv: Sequence[str],
    cwd: str | os.PathLike[str] | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """
    Run ``argv`` synchronously, capturing combined output.

    The child runs in its own session. On timeout the whole process
    group is killed, so grandchildren (``npm`` -> ``node``) die with it,
    and ``exit_status`` is None. Output is decoded as UTF-8 with
    undecodable bytes replaced. A missing executable is reported as exit
    status 127 and one that cannot be started as 126, like a shell would.
    """
    logger.debug("Running %s (cwd=%s, timeout=%s)", " ".join(argv), cwd, timeout)
    start = time.monotonic()
    try:
        proc = subprocess.Popen(
            list(argv),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except FileNotFoundError as exc:
        return CommandResult(exit_status=127, output=str(exc))
    except OSError as exc:
        return CommandResult(exit_status=126, output=str(exc))

    with proc:
        try:
            output, _ = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            output, _ = proc.communicate()
            logger.debug("Killed process group %d after %ss", proc.pid, timeout)
            return CommandResult(
                exit_status=None,
                output=output or "",
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except BaseException:
            _kill_group(proc)
            raise

    return CommandResult(
        exit_status=proc.returncode,
        output=output or "",
        duration_ms=int((time.monotonic() - start) * 1000),
    )


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


class RevertBackend(ABC):
    """
    Version-control revert primitive.

    Subclasses must implement revert_to() and current_ref().
    """

    @abstractmethod
    def revert_to(self, ref: str) -> CommandResult:
        """
        Hard-revert the working tree to ``ref``.

        Args:
            ref: The version-control reference to restore.

        Returns:
            The command outcome; a non-zero status means nothing changed.
        """
        ...

    @abstractmethod
    def current_ref(self) -> str:
        """Return the reference the working tree is currently at."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class TestBackend(ABC):
    """Test-runner primitive."""

    __test__ = False

    @abstractmethod
    def run_tests(self) -> CommandResult:
        """Run the project's test suite and report its exit status and output."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"

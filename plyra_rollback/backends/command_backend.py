"""
Command Test Backend
~~~~~~~~~~~~~~~~~~~~

Runs the project's configured test command as a subprocess.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from plyra_rollback.backends.base import CommandResult, TestBackend, run_command

__all__ = ["CommandTestBackend"]


class CommandTestBackend(TestBackend):
    """Test backend that runs ``command`` in ``cwd`` with an optional deadline."""

    def __init__(
        self,
        command: Sequence[str],
        cwd: str | os.PathLike[str],
        timeout: float | None = None,
    ) -> None:
        if not command:
            raise ValueError("Test command must not be empty")
        self._command = list(command)
        self._cwd = cwd
        self._timeout = timeout

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def run_tests(self) -> CommandResult:
        return run_command(self._command, cwd=self._cwd, timeout=self._timeout)

    def __repr__(self) -> str:
        return f"<CommandTestBackend command={self._command!r}>"

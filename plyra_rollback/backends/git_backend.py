"""
Git Revert Backend
~~~~~~~~~~~~~~~~~~

Reverts the working tree with ``git reset --hard <ref>`` (or any
configured command that takes the reference as its last argument).
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from plyra_rollback.backends.base import CommandResult, RevertBackend, run_command
from plyra_rollback.exceptions import RevertError

__all__ = ["GitRevertBackend"]


class GitRevertBackend(RevertBackend):
    """
    Revert backend that shells out to git.

    Args:
        cwd: Repository working directory.
        command: Revert argv; the target reference is appended.
        timeout: Seconds before the revert is killed.
    """

    def __init__(
        self,
        cwd: str | os.PathLike[str],
        command: Sequence[str] = ("git", "reset", "--hard"),
        timeout: float | None = None,
    ) -> None:
        self._cwd = cwd
        self._command = list(command)
        self._timeout = timeout

    def revert_to(self, ref: str) -> CommandResult:
        return run_command([*self._command, ref], cwd=self._cwd, timeout=self._timeout)

    def current_ref(self) -> str:
        result = run_command(
            ["git", "rev-parse", "HEAD"], cwd=self._cwd, timeout=self._timeout
        )
        if not result.ok:
            raise RevertError(
                "Cannot determine the current commit",
                ref="HEAD",
                exit_status=result.exit_status,
                output=result.output,
            )
        return result.output.strip()

    def __repr__(self) -> str:
        return f"<GitRevertBackend command={self._command!r} cwd={str(self._cwd)!r}>"

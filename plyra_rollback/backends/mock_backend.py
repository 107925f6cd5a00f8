"""
Mock Backends
~~~~~~~~~~~~~

Deterministic revert and test backends. They never touch the
filesystem or spawn processes; they only record how they were called.
"""

from __future__ import annotations

from collections.abc import Callable

from plyra_rollback.backends.base import CommandResult, RevertBackend, TestBackend

__all__ = ["MockRevertBackend", "MockTestBackend"]


class MockRevertBackend(RevertBackend):
    """
    Revert backend returning a fixed exit status.

    A successful revert moves ``head`` to the requested reference, so
    tests can assert on the "working tree" position.
    """

    def __init__(
        self,
        exit_status: int | None = 0,
        output: str = "",
        head: str = "HEAD0000",
        on_revert: Callable[[str], None] | None = None,
    ) -> None:
        self.exit_status = exit_status
        self.output = output
        self.head = head
        self.calls: list[str] = []
        self._on_revert = on_revert

    def revert_to(self, ref: str) -> CommandResult:
        self.calls.append(ref)
        if self.exit_status == 0:
            self.head = ref
            if self._on_revert is not None:
                self._on_revert(ref)
        return CommandResult(exit_status=self.exit_status, output=self.output)

    def current_ref(self) -> str:
        return self.head


class MockTestBackend(TestBackend):
    """Test backend returning a fixed exit status and output."""

    def __init__(self, exit_status: int | None = 0, output: str = "all tests passed") -> None:
        self.exit_status = exit_status
        self.output = output
        self.calls = 0

    def run_tests(self) -> CommandResult:
        self.calls += 1
        return CommandResult(exit_status=self.exit_status, output=self.output)

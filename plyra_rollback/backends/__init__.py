"""External capabilities: version-control revert and test runner."""

from plyra_rollback.backends.base import (
    CommandResult,
    RevertBackend,
    TestBackend,
    run_command,
)
from plyra_rollback.backends.command_backend import CommandTestBackend
from plyra_rollback.backends.git_backend import GitRevertBackend
from plyra_rollback.backends.mock_backend import MockRevertBackend, MockTestBackend

__all__ = [
    "CommandResult",
    "RevertBackend",
    "TestBackend",
    "run_command",
    "GitRevertBackend",
    "CommandTestBackend",
    "MockRevertBackend",
    "MockTestBackend",
]

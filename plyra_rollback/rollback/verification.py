"""
Verification Runner
~~~~~~~~~~~~~~~~~~~

Runs the project's test suite after a revert. Failure is reported,
never repaired: the working tree stays reverted and the caller is
responsible for manual recovery.
"""

from __future__ import annotations

import logging

from plyra_rollback.backends.base import CommandResult, TestBackend
from plyra_rollback.exceptions import VerificationError

__all__ = ["VerificationRunner"]

logger = logging.getLogger(__name__)

_OUTPUT_TAIL_LINES = 40


def _tail(text: str, lines: int = _OUTPUT_TAIL_LINES) -> str:
    return "\n".join(text.rstrip().splitlines()[-lines:])


class VerificationRunner:
    """Confirms post-revert health via a ``TestBackend``."""

    def __init__(self, backend: TestBackend) -> None:
        self._backend = backend

    def verify(self, backup_path: str = "") -> CommandResult:
        """
        Run the tests.

        Args:
            backup_path: Backup taken before the revert, quoted in error guidance.

        Returns:
            The successful CommandResult.

        Raises:
            VerificationError: If the tests fail or time out.
        """
        logger.info("Running verification tests")
        result = self._backend.run_tests()

        if result.ok:
            logger.debug("Tests passed in %dms", result.duration_ms)
            return result

        if result.output.strip():
            logger.error("Test output (last %d lines):\n%s", _OUTPUT_TAIL_LINES, _tail(result.output))

        message = (
            "verification timed out"
            if result.timed_out
            else f"verification failed with exit status {result.exit_status}"
        )
        raise VerificationError(
            message,
            exit_status=result.exit_status,
            output=result.output,
            backup_path=backup_path,
        )

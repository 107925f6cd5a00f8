"""
Revert Executor
~~~~~~~~~~~~~~~

Performs the destructive revert to a resolved rollback point through
the injected version-control backend. All-or-nothing: any non-zero
exit status (or a timeout) is fatal.
"""

from __future__ import annotations

import logging

from plyra_rollback.backends.base import RevertBackend
from plyra_rollback.core.models import RollbackPoint
from plyra_rollback.exceptions import RevertError

__all__ = ["RevertExecutor"]

logger = logging.getLogger(__name__)


class RevertExecutor:
    """Reverts the working tree via a ``RevertBackend``."""

    def __init__(self, backend: RevertBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> RevertBackend:
        return self._backend

    def revert(self, point: RollbackPoint, backup_path: str = "") -> None:
        """
        Revert to ``point.id``.

        Args:
            point: The resolved rollback point.
            backup_path: Backup taken beforehand, quoted in error guidance.

        Raises:
            RevertError: If the backend reports failure or times out.
        """
        logger.info("Reverting working tree to %s", point.id)
        result = self._backend.revert_to(point.id)
        if result.output.strip():
            logger.debug("Revert output:\n%s", result.output.rstrip())

        if result.timed_out:
            raise RevertError(
                f"revert to {point.id} timed out",
                ref=point.id,
                exit_status=None,
                output=result.output,
                backup_path=backup_path,
            )
        if not result.ok:
            raise RevertError(
                f"revert to {point.id} failed with exit status {result.exit_status}",
                ref=point.id,
                exit_status=result.exit_status,
                output=result.output,
                backup_path=backup_path,
            )

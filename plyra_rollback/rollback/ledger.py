"""
Audit Ledger
~~~~~~~~~~~~

Append-only record of verified rollbacks, kept in the Passport.
"""

from __future__ import annotations

import logging

from plyra_rollback.core.models import RollbackRecord
from plyra_rollback.exceptions import PersistError, RegistryError
from plyra_rollback.state.store import PassportStore

__all__ = ["AuditLedger"]

logger = logging.getLogger(__name__)


class AuditLedger:
    """
    Writes RollbackRecords to ``rollback_history``.

    Records are only ever appended; nothing here edits or removes one.
    """

    def __init__(self, store: PassportStore) -> None:
        self._store = store

    def append(self, record: RollbackRecord) -> None:
        """
        Append ``record`` and set ``last_rollback``, then persist.

        The Passport is re-read first so points registered since the
        pipeline started are kept.

        Raises:
            PersistError: If the Passport cannot be read back or written.
        """
        try:
            passport = self._store.load()
        except RegistryError as exc:
            raise PersistError(f"Cannot reload Passport for ledger update: {exc}") from exc

        passport.rollback_history.append(record)
        passport.last_rollback = record.rollback_time
        self._store.save(passport)
        logger.debug(
            "Recorded rollback to %s (history length %d)",
            record.target_point_id,
            len(passport.rollback_history),
        )

    def history(self) -> list[RollbackRecord]:
        """All recorded rollbacks, oldest first."""
        return list(self._store.load().rollback_history)

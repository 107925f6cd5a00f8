"""plyra-rollback pipeline stages."""

from plyra_rollback.rollback.backup import MANIFEST_FILENAME, StateBackupManager
from plyra_rollback.rollback.ledger import AuditLedger
from plyra_rollback.rollback.registry import LATEST, RollbackPointRegistry
from plyra_rollback.rollback.revert import RevertExecutor
from plyra_rollback.rollback.verification import VerificationRunner

__all__ = [
    "RollbackPointRegistry",
    "StateBackupManager",
    "RevertExecutor",
    "VerificationRunner",
    "AuditLedger",
    "LATEST",
    "MANIFEST_FILENAME",
]

"""plyra-rollback core module: data models and pipeline states."""

from plyra_rollback.core.models import (
    BackupManifest,
    ManifestEntry,
    Passport,
    RollbackPoint,
    RollbackRecord,
    RunResult,
)
from plyra_rollback.core.states import PipelineState

__all__ = [
    "PipelineState",
    "RollbackPoint",
    "RollbackRecord",
    "ManifestEntry",
    "BackupManifest",
    "Passport",
    "RunResult",
]

"""
plyra-rollback — one-shot rollback and recovery for project working trees.

Part of the Plyra infrastructure suite.

plyra-rollback resolves a recorded rollback point and walks a strict
pipeline, stopping at the first failure:

- Resolve the target (``latest``, an id, or a description fragment)
- Confirm with the operator (unless forced)
- Back up the configured files to a timestamped directory
- Revert the working tree through version control
- Run the test suite to verify the result
- Append the verified rollback to the Passport history

Quick Start::

    from plyra_rollback import RecoveryOrchestrator, load_config

    orchestrator = RecoveryOrchestrator.from_config(load_config("rollback.yaml"))
    result = orchestrator.run("latest", force=True)
    print(result.state, result.manifest.path if result.manifest else None)

:copyright: (c) 2024 Plyra
:license: Apache-2.0
"""

from plyra_rollback.backends import (
    CommandResult,
    CommandTestBackend,
    GitRevertBackend,
    MockRevertBackend,
    MockTestBackend,
    RevertBackend,
    TestBackend,
)
from plyra_rollback.config import RollbackConfig, load_config, load_config_from_dict
from plyra_rollback.core.models import (
    BackupManifest,
    ManifestEntry,
    Passport,
    RollbackPoint,
    RollbackRecord,
    RunResult,
)
from plyra_rollback.core.orchestrator import RecoveryOrchestrator
from plyra_rollback.core.states import PipelineState
from plyra_rollback.rollback import (
    AuditLedger,
    RevertExecutor,
    RollbackPointRegistry,
    StateBackupManager,
    VerificationRunner,
)
from plyra_rollback.state import (
    InMemoryPassportStore,
    JsonPassportStore,
    PassportStore,
    PipelineLock,
)

__version__ = "0.1.0"
__author__ = "Plyra"
__license__ = "Apache-2.0"

__all__ = [
    # Main class
    "RecoveryOrchestrator",
    "PipelineState",
    # Data models
    "RollbackPoint",
    "RollbackRecord",
    "ManifestEntry",
    "BackupManifest",
    "Passport",
    "RunResult",
    # Pipeline stages
    "RollbackPointRegistry",
    "StateBackupManager",
    "RevertExecutor",
    "VerificationRunner",
    "AuditLedger",
    # State
    "PassportStore",
    "JsonPassportStore",
    "InMemoryPassportStore",
    "PipelineLock",
    # Backends
    "CommandResult",
    "RevertBackend",
    "TestBackend",
    "GitRevertBackend",
    "CommandTestBackend",
    "MockRevertBackend",
    "MockTestBackend",
    # Config
    "RollbackConfig",
    "load_config",
    "load_config_from_dict",
    # Metadata
    "__version__",
]

"""
plyra.rollback — namespace bridge for plyra-rollback.

Allows importing via:
    from plyra.rollback import RecoveryOrchestrator
"""

from plyra_rollback import *  # noqa: F401, F403
from plyra_rollback import (
    Passport,
    PipelineState,
    RecoveryOrchestrator,
    RollbackPoint,
    RollbackRecord,
    RunResult,
    __version__,
)

__all__ = [
    "RecoveryOrchestrator",
    "PipelineState",
    "Passport",
    "RollbackPoint",
    "RollbackRecord",
    "RunResult",
    "__version__",
]

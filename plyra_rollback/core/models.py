"""
plyra-rollback Data Models
~~~~~~~~~~~~~~~~~~~~~~~~~~

Defines the dataclasses that flow through the recovery pipeline:
RollbackPoint (input), RollbackRecord and BackupManifest (artifacts),
Passport (persisted state) and RunResult (output).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from plyra_rollback.core.states import PipelineState

__all__ = [
    "RollbackPoint",
    "RollbackRecord",
    "ManifestEntry",
    "BackupManifest",
    "Passport",
    "RunResult",
]


@dataclass(frozen=True)
class RollbackPoint:
    """
    A named, addressable prior state the project can be reverted to.

    Attributes:
        id: Version-control reference, e.g. a commit hash.
        description: Human-readable label used for substring lookup.
        created_at: When the point was recorded.
    """

    id: str
    description: str
    created_at: datetime

    def summary(self) -> str:
        """One-line description used in console output."""
        return (
            f"{self.id} ({self.description}, "
            f"recorded {self.created_at.isoformat(timespec='seconds')})"
        )


@dataclass(frozen=True)
class RollbackRecord:
    """
    One verified rollback, as appended to the Passport history.

    Attributes:
        target_point_id: The ``RollbackPoint.id`` that was restored.
        rollback_time: When the rollback completed verification.
        backup_location: Directory holding the pre-revert backup.
        reason: Free-text justification supplied by the operator.
    """

    target_point_id: str
    rollback_time: datetime
    backup_location: Path
    reason: str


@dataclass(frozen=True)
class ManifestEntry:
    """A single copied file: where it lives in the backup and where it came from."""

    relative_path: str
    source_file: Path


@dataclass
class BackupManifest:
    """
    Record of a pre-revert snapshot.

    Attributes:
        path: The backup directory.
        created_at: When the snapshot started.
        globs: The patterns that were expanded.
        entries: One entry per copied file.
        complete: False if the snapshot failed part way through.
    """

    path: Path
    created_at: datetime
    globs: tuple[str, ...]
    entries: list[ManifestEntry] = field(default_factory=list)
    complete: bool = False

    def relative_paths(self) -> set[str]:
        """Relative paths of every file copied into the backup."""
        return {entry.relative_path for entry in self.entries}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for ``manifest.json``."""
        return {
            "path": str(self.path),
            "created_at": self.created_at.isoformat(),
            "globs": list(self.globs),
            "complete": self.complete,
            "files": [
                {
                    "relative_path": entry.relative_path,
                    "source_file": str(entry.source_file),
                }
                for entry in self.entries
            ],
        }


@dataclass
class Passport:
    """
    Persisted ledger of known rollback points and past rollbacks.

    ``rollback_points`` is ordered most-recent-first. ``extra`` carries
    top-level keys this tool does not own so they survive a write-back.
    """

    rollback_points: list[RollbackPoint] = field(default_factory=list)
    rollback_history: list[RollbackRecord] = field(default_factory=list)
    last_rollback: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class RunResult:
    """
    Outcome of one orchestrator run.

    Attributes:
        state: Terminal pipeline state.
        query: The target identifier that was requested.
        target: The resolved rollback point, if resolution succeeded.
        manifest: The backup taken, if the backup step ran.
        record: The ledger record, if the rollback was verified.
        error: The exception that aborted the run, if any.
        transitions: Every state the run passed through, in order.
        ledger_persisted: False if the record could not be written.
        dry_run: Whether this was a simulation.
        started_at: When the run began.
        finished_at: When the run reached its terminal state.
    """

    state: PipelineState
    query: str
    target: RollbackPoint | None = None
    manifest: BackupManifest | None = None
    record: RollbackRecord | None = None
    error: Exception | None = None
    transitions: list[PipelineState] = field(default_factory=list)
    ledger_persisted: bool = True
    dry_run: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def success(self) -> bool:
        return self.state.is_success()

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def reason(self) -> str:
        """Why the run aborted, or an empty string."""
        return str(self.error.args[0]) if self.error and self.error.args else ""

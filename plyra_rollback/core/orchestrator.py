"""
Recovery Orchestrator
~~~~~~~~~~~~~~~~~~~~~

Sequences the recovery pipeline: resolve the target, confirm intent,
back up, revert, verify and record. Any stage failure aborts the run
before later stages; only a verified rollback reaches the ledger.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

from plyra_rollback.backends.base import RevertBackend, TestBackend
from plyra_rollback.backends.command_backend import CommandTestBackend
from plyra_rollback.backends.git_backend import GitRevertBackend
from plyra_rollback.config.schema import RollbackConfig
from plyra_rollback.core.models import RollbackPoint, RollbackRecord, RunResult
from plyra_rollback.core.states import PipelineState
from plyra_rollback.exceptions import (
    ConfirmationDeclinedError,
    PersistError,
    RollbackToolError,
)
from plyra_rollback.observability.run_log import log_success
from plyra_rollback.rollback.backup import StateBackupManager
from plyra_rollback.rollback.ledger import AuditLedger
from plyra_rollback.rollback.registry import LATEST, RollbackPointRegistry
from plyra_rollback.rollback.revert import RevertExecutor
from plyra_rollback.rollback.verification import VerificationRunner
from plyra_rollback.state.lock import PipelineLock
from plyra_rollback.state.store import JsonPassportStore, PassportStore

__all__ = ["RecoveryOrchestrator", "ConfirmCallback", "DEFAULT_REASON"]

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[RollbackPoint], bool]

DEFAULT_REASON = "manual rollback"


class RecoveryOrchestrator:
    """
    One-shot rollback pipeline.

    All collaborators are injected, so tests can run the full state
    machine against an in-memory Passport and mock backends.

    Args:
        registry: Resolves the target rollback point.
        backup_manager: Takes the pre-revert snapshot.
        revert_executor: Performs the destructive revert.
        verification_runner: Runs the tests after the revert.
        ledger: Records verified rollbacks.
        confirm: Asked before any mutation; None means non-interactive.
        lock: Held for the whole mutating part of a run.
        clock: Source of record timestamps.
    """

    def __init__(
        self,
        registry: RollbackPointRegistry,
        backup_manager: StateBackupManager,
        revert_executor: RevertExecutor,
        verification_runner: VerificationRunner,
        ledger: AuditLedger,
        confirm: ConfirmCallback | None = None,
        lock: PipelineLock | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._backup_manager = backup_manager
        self._revert_executor = revert_executor
        self._verification_runner = verification_runner
        self._ledger = ledger
        self._confirm = confirm
        self._lock = lock
        self._clock = clock or (lambda: datetime.now(UTC))

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def from_config(
        cls,
        config: RollbackConfig,
        confirm: ConfirmCallback | None = None,
        store: PassportStore | None = None,
        revert_backend: RevertBackend | None = None,
        test_backend: TestBackend | None = None,
    ) -> RecoveryOrchestrator:
        """
        Assemble a pipeline from configuration.

        Any of ``store``, ``revert_backend`` or ``test_backend`` may be
        supplied to replace the real implementation.
        """
        store = store or JsonPassportStore(config.passport_path)
        revert_backend = revert_backend or GitRevertBackend(
            cwd=config.root,
            command=config.revert.command,
            timeout=config.revert.timeout_seconds,
        )
        test_backend = test_backend or CommandTestBackend(
            command=config.verification.command,
            cwd=config.root,
            timeout=config.verification.timeout_seconds,
        )
        return cls(
            registry=RollbackPointRegistry(store),
            backup_manager=StateBackupManager(
                root=config.root,
                backup_root=config.backup_root,
                globs=config.backup.globs,
            ),
            revert_executor=RevertExecutor(revert_backend),
            verification_runner=VerificationRunner(test_backend),
            ledger=AuditLedger(store),
            confirm=confirm,
            lock=PipelineLock(config.lock_path, timeout=config.lock.timeout_seconds),
        )

    @property
    def registry(self) -> RollbackPointRegistry:
        return self._registry

    @property
    def ledger(self) -> AuditLedger:
        return self._ledger

    # ── Public API ───────────────────────────────────────────────

    def run(
        self,
        query: str = LATEST,
        *,
        force: bool = False,
        dry_run: bool = False,
        reason: str = DEFAULT_REASON,
    ) -> RunResult:
        """
        Execute the pipeline for ``query``.

        Pipeline failures do not raise; they end the run in ABORTED with
        the exception in ``RunResult.error``. A failed ledger write is
        logged as a warning and leaves the run successful.

        Args:
            query: ``"latest"``, a rollback point id, or a description substring.
            force: Skip the confirmation step.
            dry_run: Resolve and report only; nothing is changed.
            reason: Stored in the RollbackRecord.

        Returns:
            The RunResult describing where the run ended.
        """
        result = RunResult(
            state=PipelineState.IDLE,
            query=query,
            dry_run=dry_run,
            transitions=[PipelineState.IDLE],
            started_at=self._clock(),
        )

        try:
            self._advance(result, PipelineState.RESOLVING_TARGET)
            logger.info("Resolving rollback target %r", query)
            target = self._registry.resolve(query)
            result.target = target

            if dry_run:
                self._advance(result, PipelineState.REPORTED)
                logger.info(
                    "[DRY RUN] Would roll back to %s; no changes made", target.summary()
                )
                result.finished_at = self._clock()
                return result

            with self._locked():
                self._run_mutating(result, target, force=force, reason=reason)
        except RollbackToolError as exc:
            self._abort(result, exc)

        result.finished_at = self._clock()
        return result

    def checkpoint(self, description: str) -> RollbackPoint:
        """
        Record the current version-control position as a new rollback point.

        Raises:
            RevertError: If the current reference cannot be determined.
            RegistryError: If that reference is already registered.
            PersistError: If the Passport cannot be written.
        """
        with self._locked():
            ref = self._revert_executor.backend.current_ref()
            point = RollbackPoint(id=ref, description=description, created_at=self._clock())
            self._registry.record(point)
        log_success(logger, "Recorded rollback point %s", point.summary())
        return point

    # ── Internals ────────────────────────────────────────────────

    def _run_mutating(
        self,
        result: RunResult,
        target: RollbackPoint,
        force: bool,
        reason: str,
    ) -> None:
        if not force and self._confirm is not None:
            self._advance(result, PipelineState.CONFIRMING_INTENT)
            if not self._ask(target):
                raise ConfirmationDeclinedError("cancelled by user")

        self._advance(result, PipelineState.BACKING_UP)
        manifest = self._backup_manager.snapshot()
        result.manifest = manifest
        backup_path = str(manifest.path)

        self._advance(result, PipelineState.REVERTING)
        self._revert_executor.revert(target, backup_path=backup_path)

        self._advance(result, PipelineState.VERIFYING)
        self._verification_runner.verify(backup_path=backup_path)

        record = RollbackRecord(
            target_point_id=target.id,
            rollback_time=self._clock(),
            backup_location=manifest.path,
            reason=reason,
        )
        result.record = record
        try:
            self._ledger.append(record)
        except PersistError as exc:
            result.ledger_persisted = False
            logger.warning("Rollback succeeded but was not recorded: %s", exc)

        self._advance(result, PipelineState.LEDGER_UPDATED)
        log_success(
            logger,
            "Rolled back to %s (backup: %s)",
            target.summary(),
            manifest.path,
        )

    def _ask(self, target: RollbackPoint) -> bool:
        try:
            return bool(self._confirm(target))  # type: ignore[misc]
        except Exception as exc:
            raise ConfirmationDeclinedError(f"confirmation failed: {exc}") from exc

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    def _advance(self, result: RunResult, state: PipelineState) -> None:
        if not result.state.can_transition_to(state):
            raise RuntimeError(f"Illegal pipeline transition {result.state} -> {state}")
        logger.debug("Pipeline state %s -> %s", result.state, state)
        result.state = state
        result.transitions.append(state)

    def _abort(self, result: RunResult, exc: RollbackToolError) -> None:
        stage = result.state
        result.error = exc
        result.state = PipelineState.ABORTED
        result.transitions.append(PipelineState.ABORTED)
        logger.error("Rollback aborted during %s: %s", stage, exc)

    def __repr__(self) -> str:
        return (
            f"<RecoveryOrchestrator revert={self._revert_executor.backend!r} "
            f"interactive={self._confirm is not None}>"
        )

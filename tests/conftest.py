"""Shared fixtures for plyra-rollback tests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from plyra_rollback import (
    AuditLedger,
    InMemoryPassportStore,
    MockRevertBackend,
    MockTestBackend,
    Passport,
    PipelineLock,
    RecoveryOrchestrator,
    RevertExecutor,
    RollbackPoint,
    RollbackPointRegistry,
    StateBackupManager,
    VerificationRunner,
)
from plyra_rollback.observability.run_log import PACKAGE_LOGGER

BACKUP_GLOBS = ("package.json", "src/**/*.js", ".env*")


@pytest.fixture
def initial_point() -> RollbackPoint:
    """The single point of the canonical one-entry registry."""
    return RollbackPoint(
        id="abc123",
        description="initial_state",
        created_at=datetime(2025, 9, 26, 18, 45, 45, tzinfo=UTC),
    )


@pytest.fixture
def sample_points() -> list[RollbackPoint]:
    """A three-entry registry, most recent first."""
    return [
        RollbackPoint(
            id="f00d003",
            description="after checkout refactor",
            created_at=datetime(2025, 10, 3, 9, 0, tzinfo=UTC),
        ),
        RollbackPoint(
            id="beef002",
            description="before payment migration",
            created_at=datetime(2025, 10, 1, 12, 30, tzinfo=UTC),
        ),
        RollbackPoint(
            id="abc123",
            description="initial_state",
            created_at=datetime(2025, 9, 26, 18, 45, 45, tzinfo=UTC),
        ),
    ]


@pytest.fixture
def store(initial_point) -> InMemoryPassportStore:
    """In-memory Passport holding only ``initial_point``."""
    return InMemoryPassportStore(Passport(rollback_points=[initial_point]))


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """A small project tree with files the backup globs match."""
    root = tmp_path / "project"
    (root / "src" / "lib").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "package.json").write_text('{"name": "storefront"}\n')
    (root / ".env").write_text("API_URL=http://localhost\n")
    (root / "src" / "app.js").write_text("console.log('app');\n")
    (root / "src" / "lib" / "util.js").write_text("module.exports = {};\n")
    (root / "README.md").write_text("not backed up\n")
    return root


@pytest.fixture
def backup_manager(project_dir) -> StateBackupManager:
    return StateBackupManager(
        root=project_dir,
        backup_root=project_dir / ".rollback" / "backups",
        globs=BACKUP_GLOBS,
    )


@pytest.fixture
def revert_backend() -> MockRevertBackend:
    return MockRevertBackend()


@pytest.fixture
def suite_backend() -> MockTestBackend:
    return MockTestBackend()


@pytest.fixture
def make_orchestrator(
    store, backup_manager, revert_backend, suite_backend, project_dir
) -> Callable[..., RecoveryOrchestrator]:
    """Factory building an orchestrator from the shared fixtures, with overrides."""

    def _make(**overrides) -> RecoveryOrchestrator:
        passport_store = overrides.pop("store", store)
        kwargs = {
            "registry": RollbackPointRegistry(passport_store),
            "backup_manager": backup_manager,
            "revert_executor": RevertExecutor(overrides.pop("revert_backend", revert_backend)),
            "verification_runner": VerificationRunner(
                overrides.pop("test_backend", suite_backend)
            ),
            "ledger": AuditLedger(passport_store),
            "lock": PipelineLock(project_dir / ".rollback" / "rollback.lock", timeout=0),
        }
        kwargs.update(overrides)
        return RecoveryOrchestrator(**kwargs)

    return _make


@pytest.fixture(autouse=True)
def reset_run_logging():
    """Detach handlers installed by configure_run_logging after each test."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)

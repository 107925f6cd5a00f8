"""Integration test: full pipeline against a real Passport file and backup tree."""

import json

import pytest

from plyra_rollback import (
    MockRevertBackend,
    MockTestBackend,
    PipelineState,
    RecoveryOrchestrator,
)
from plyra_rollback.config.loader import load_config_from_dict
from plyra_rollback.exceptions import BackupError, VerificationError

PASSPORT = {
    "project": "storefront",
    "rollback_points": [
        {
            "commit_hash": "abc123",
            "description": "initial_state",
            "timestamp": "2025-09-26T18:45:45Z",
        }
    ],
    "rollback_history": [],
    "last_rollback": None,
}


@pytest.fixture
def config(project_dir):
    passport = project_dir / ".rollback" / "passport.json"
    passport.parent.mkdir()
    passport.write_text(json.dumps(PASSPORT))
    return load_config_from_dict(
        {
            "project": {"root": str(project_dir)},
            "backup": {"globs": ["package.json", ".env*", "src/**/*"]},
            "lock": {"timeout_seconds": 0},
        }
    )


def _read_passport(config) -> dict:
    return json.loads(config.passport_path.read_text())


class TestFullPipeline:
    """End-to-end runs of the recovery pipeline."""

    def test_rollback_backs_up_pre_revert_state(self, config, project_dir):
        """Files are captured before the revert rewrites them."""

        def rewrite_tree(ref: str) -> None:
            (project_dir / "package.json").write_text('{"name": "storefront", "v": 1}\n')

        (project_dir / "package.json").write_text('{"name": "storefront", "v": 2}\n')
        orchestrator = RecoveryOrchestrator.from_config(
            config,
            revert_backend=MockRevertBackend(on_revert=rewrite_tree),
            test_backend=MockTestBackend(),
        )
        result = orchestrator.run("latest", force=True, reason="broken checkout")

        assert result.state == PipelineState.LEDGER_UPDATED
        backup_copy = result.manifest.path / "package.json"
        assert '"v": 2' in backup_copy.read_text()
        assert '"v": 1' in (project_dir / "package.json").read_text()

        manifest = json.loads((result.manifest.path / "manifest.json").read_text())
        assert manifest["complete"] is True
        assert {f["relative_path"] for f in manifest["files"]} == {
            "package.json",
            ".env",
            "src/app.js",
            "src/lib/util.js",
        }

    def test_history_is_persisted(self, config):
        orchestrator = RecoveryOrchestrator.from_config(
            config,
            revert_backend=MockRevertBackend(),
            test_backend=MockTestBackend(),
        )
        result = orchestrator.run("abc123", force=True, reason="broken checkout")

        passport = _read_passport(config)
        assert passport["project"] == "storefront"
        assert len(passport["rollback_points"]) == 1
        assert passport["rollback_history"] == [
            {
                "rollback_point": "abc123",
                "rollback_time": passport["last_rollback"],
                "backup_location": str(result.manifest.path),
                "reason": "broken checkout",
            }
        ]

    def test_repeated_rollbacks_append(self, config):
        orchestrator = RecoveryOrchestrator.from_config(
            config,
            revert_backend=MockRevertBackend(),
            test_backend=MockTestBackend(),
        )
        first = orchestrator.run("abc123", force=True)
        second = orchestrator.run("abc123", force=True)

        assert first.manifest.path != second.manifest.path
        history = _read_passport(config)["rollback_history"]
        assert [h["backup_location"] for h in history] == [
            str(first.manifest.path),
            str(second.manifest.path),
        ]

    def test_verification_failure_leaves_passport_untouched(self, config):
        before = config.passport_path.read_text()
        revert = MockRevertBackend()
        orchestrator = RecoveryOrchestrator.from_config(
            config,
            revert_backend=revert,
            test_backend=MockTestBackend(exit_status=1, output="checkout.spec.js failed"),
        )
        result = orchestrator.run("abc123", force=True)

        assert isinstance(result.error, VerificationError)
        assert revert.head == "abc123"
        assert config.passport_path.read_text() == before
        assert result.manifest.path.is_dir()

    def test_unwritable_backup_root_prevents_revert(self, project_dir):
        passport = project_dir / ".rollback" / "passport.json"
        passport.parent.mkdir()
        passport.write_text(json.dumps(PASSPORT))
        blocker = project_dir / "not-a-dir"
        blocker.write_text("")
        config = load_config_from_dict(
            {
                "project": {"root": str(project_dir)},
                "backup": {"dir": "not-a-dir/backups"},
            }
        )
        revert = MockRevertBackend()
        result = RecoveryOrchestrator.from_config(
            config, revert_backend=revert, test_backend=MockTestBackend()
        ).run("abc123", force=True)

        assert isinstance(result.error, BackupError)
        assert revert.calls == []
        assert json.loads(passport.read_text())["rollback_history"] == []

    def test_checkpoint_round_trip(self, config):
        revert = MockRevertBackend(head="d1ce5e7")
        orchestrator = RecoveryOrchestrator.from_config(
            config, revert_backend=revert, test_backend=MockTestBackend()
        )
        orchestrator.checkpoint("after hotfix")

        points = _read_passport(config)["rollback_points"]
        assert [p["commit_hash"] for p in points] == ["d1ce5e7", "abc123"]
        assert orchestrator.run("after hotfix", dry_run=True).target.id == "d1ce5e7"

"""
Shared fixtures for real-world tests.

These fixtures create a REAL git repository in a temp directory and
drive the pipeline with the real git revert backend; only the test
command is a stand-in.
"""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest
import yaml


def git(repo: Path, *args: str) -> str:
    """Run a git command in ``repo`` and return its stdout."""
    proc = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return proc.stdout.strip()


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's global configuration."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Rollback Tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Rollback Tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def git_repo(tmp_path, git_env, monkeypatch) -> Path:
    """
    A storefront repository with two commits.

    The first commit is registered as the ``initial_state`` rollback
    point; the second, "broken release", is HEAD. The working directory
    is the repository root.
    """
    repo = tmp_path / "storefront"
    (repo / "src").mkdir(parents=True)
    git(repo, "init", "--quiet")

    (repo / ".gitignore").write_text(".rollback/\n")
    (repo / "package.json").write_text('{"name": "storefront", "version": "1.0.0"}\n')
    (repo / "src" / "cart.js").write_text("export const total = (items) => items.length;\n")
    git(repo, "add", "-A")
    git(repo, "commit", "--quiet", "-m", "initial state")
    initial = git(repo, "rev-parse", "HEAD")

    (repo / "package.json").write_text('{"name": "storefront", "version": "1.1.0"}\n')
    (repo / "src" / "cart.js").write_text("export const total = () => NaN;\n")
    git(repo, "commit", "--quiet", "-am", "broken release")

    passport = {
        "rollback_points": [
            {
                "commit_hash": initial,
                "description": "initial_state",
                "timestamp": "2025-09-26T18:45:45Z",
            }
        ],
        "rollback_history": [],
        "last_rollback": None,
    }
    (repo / ".rollback").mkdir()
    (repo / ".rollback" / "passport.json").write_text(json.dumps(passport, indent=2))

    config = {
        "backup": {"globs": ["package.json", "src/**/*.js"]},
        "verification": {
            "command": [
                sys.executable,
                "-c",
                "import pathlib, sys; "
                "sys.exit(0 if 'NaN' not in pathlib.Path('src/cart.js').read_text() else 1)",
            ]
        },
    }
    (repo / "rollback.yaml").write_text(yaml.safe_dump(config))

    monkeypatch.chdir(repo)
    return repo

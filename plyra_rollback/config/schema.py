"""
Configuration Schema
~~~~~~~~~~~~~~~~~~~~

Pydantic models for validating plyra-rollback configuration.
"""

from __future__ import annotations

import shlex
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

__all__ = [
    "RollbackConfig",
    "ProjectConfig",
    "PassportConfig",
    "BackupConfig",
    "CommandConfig",
    "LockConfig",
    "LoggingConfig",
]


def _split_command(v: str | list[str]) -> list[str]:
    """Accept either a shell-style string or an argv list."""
    argv = shlex.split(v) if isinstance(v, str) else list(v)
    if not argv:
        raise ValueError("Command must not be empty")
    return argv


class ProjectConfig(BaseModel):
    """Where the project lives and how to recognise it."""

    root: str = "."
    markers: list[str] = Field(default_factory=lambda: [".git"])


class PassportConfig(BaseModel):
    """Location of the persisted Passport document."""

    path: str = ".rollback/passport.json"


class BackupConfig(BaseModel):
    """Pre-revert snapshot settings."""

    dir: str = ".rollback/backups"
    globs: list[str] = Field(default_factory=list)

    @field_validator("globs")
    @classmethod
    def validate_globs(cls, v: list[str]) -> list[str]:
        """Reject absolute patterns; globs are relative to the project root."""
        for pattern in v:
            if not pattern or Path(pattern).is_absolute():
                raise ValueError(f"Backup glob must be a relative pattern: {pattern!r}")
        return v


class CommandConfig(BaseModel):
    """An external command with a deadline."""

    command: list[str]
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("command", mode="before")
    @classmethod
    def validate_command(cls, v: str | list[str]) -> list[str]:
        return _split_command(v)


class LockConfig(BaseModel):
    """Advisory pipeline lock settings."""

    path: str = ".rollback/rollback.lock"
    timeout_seconds: float = Field(default=2.0, ge=0.0)


class LoggingConfig(BaseModel):
    """Run log settings."""

    file: str | None = ".rollback/rollback.log"
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARN", "WARNING", "ERROR", "SUCCESS"):
            raise ValueError(f"Invalid log level: {v!r}")
        return level


class RollbackConfig(BaseModel):
    """
    Root configuration model for plyra-rollback.

    Validated on load with clear error messages for invalid values.
    Relative paths are resolved against ``project.root``.
    """

    version: str = "1.0"
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    passport: PassportConfig = Field(default_factory=PassportConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    revert: CommandConfig = Field(
        default_factory=lambda: CommandConfig(command=["git", "reset", "--hard"])
    )
    verification: CommandConfig = Field(
        default_factory=lambda: CommandConfig(command=["npm", "test"])
    )
    lock: LockConfig = Field(default_factory=LockConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def root(self) -> Path:
        """Absolute project root."""
        return Path(self.project.root).expanduser().resolve()

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the project root."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.root / path

    @property
    def passport_path(self) -> Path:
        return self.resolve_path(self.passport.path)

    @property
    def backup_root(self) -> Path:
        return self.resolve_path(self.backup.dir)

    @property
    def lock_path(self) -> Path:
        return self.resolve_path(self.lock.path)

    @property
    def log_path(self) -> Path | None:
        return self.resolve_path(self.logging.file) if self.logging.file else None

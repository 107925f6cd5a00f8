"""
Passport Store
~~~~~~~~~~~~~~

Loads and saves the Passport. The on-disk document is validated with
Pydantic models that mirror its JSON schema; writes go through a temp
file, fsync and atomic rename.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from plyra_rollback.core.models import Passport, RollbackPoint, RollbackRecord
from plyra_rollback.exceptions import (
    PassportNotFoundError,
    PersistError,
    RegistryError,
)

__all__ = [
    "PassportStore",
    "JsonPassportStore",
    "InMemoryPassportStore",
    "PassportDocument",
]

logger = logging.getLogger(__name__)


# ── Wire models ──────────────────────────────────────────────────────────────


class RollbackPointModel(BaseModel):
    """One entry of ``rollback_points``."""

    commit_hash: str = Field(min_length=1)
    description: str = ""
    timestamp: datetime


class RollbackRecordModel(BaseModel):
    """One entry of ``rollback_history``."""

    rollback_point: str
    rollback_time: datetime
    backup_location: str
    reason: str = ""


class PassportDocument(BaseModel):
    """
    The Passport JSON document.

    Unknown top-level keys are kept so that a write-back does not drop
    sections owned by other tools.
    """

    rollback_points: list[RollbackPointModel] = Field(default_factory=list)
    rollback_history: list[RollbackRecordModel] = Field(default_factory=list)
    last_rollback: datetime | None = None

    model_config = {"extra": "allow"}

    def to_passport(self) -> Passport:
        """Convert to the domain model."""
        return Passport(
            rollback_points=[
                RollbackPoint(
                    id=p.commit_hash,
                    description=p.description,
                    created_at=p.timestamp,
                )
                for p in self.rollback_points
            ],
            rollback_history=[
                RollbackRecord(
                    target_point_id=r.rollback_point,
                    rollback_time=r.rollback_time,
                    backup_location=Path(r.backup_location),
                    reason=r.reason,
                )
                for r in self.rollback_history
            ],
            last_rollback=self.last_rollback,
            extra=dict(self.model_extra or {}),
        )

    @classmethod
    def from_passport(cls, passport: Passport) -> PassportDocument:
        """Build the document for a domain Passport."""
        return cls(
            rollback_points=[
                RollbackPointModel(
                    commit_hash=p.id,
                    description=p.description,
                    timestamp=p.created_at,
                )
                for p in passport.rollback_points
            ],
            rollback_history=[
                RollbackRecordModel(
                    rollback_point=r.target_point_id,
                    rollback_time=r.rollback_time,
                    backup_location=str(r.backup_location),
                    reason=r.reason,
                )
                for r in passport.rollback_history
            ],
            last_rollback=passport.last_rollback,
            **passport.extra,
        )


# ── Stores ───────────────────────────────────────────────────────────────────


class PassportStore(ABC):
    """
    Abstract persistence for the Passport.

    ``load`` raises ``RegistryError`` (or ``PassportNotFoundError``) when
    the state is missing or unparseable; ``save`` raises ``PersistError``.
    """

    @abstractmethod
    def load(self) -> Passport:
        """Read the current Passport."""
        ...

    @abstractmethod
    def save(self, passport: Passport) -> None:
        """Replace the persisted Passport."""
        ...

    def exists(self) -> bool:
        """Whether there is persisted state to load."""
        return True


class JsonPassportStore(PassportStore):
    """Passport stored as a JSON file on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Passport:
        if not self._path.is_file():
            raise PassportNotFoundError(f"Passport not found: {self._path}")
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise RegistryError(f"Cannot read Passport {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise RegistryError(f"Passport {self._path} must contain a JSON object")
        try:
            document = PassportDocument.model_validate(data)
        except ValidationError as exc:
            raise RegistryError(f"Passport {self._path} is malformed: {exc}") from exc
        return document.to_passport()

    def save(self, passport: Passport) -> None:
        try:
            data = PassportDocument.from_passport(passport).model_dump(mode="json")
            self._atomic_write(data)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistError(f"Cannot write Passport {self._path}: {exc}") from exc
        logger.debug("Saved Passport to %s", self._path)

    def _atomic_write(self, data: dict[str, Any]) -> None:
        """Atomic write with temp+fsync pattern."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=self._path.stem + "_",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise


class InMemoryPassportStore(PassportStore):
    """
    Passport kept in memory, for tests and embedding.

    Loads and saves deep copies so callers cannot mutate stored state.
    Set ``fail_on_save`` to simulate a persistence failure.
    """

    def __init__(self, passport: Passport | None = None, fail_on_save: bool = False) -> None:
        self._passport = copy.deepcopy(passport) if passport is not None else None
        self.fail_on_save = fail_on_save
        self.save_count = 0

    def exists(self) -> bool:
        return self._passport is not None

    def load(self) -> Passport:
        if self._passport is None:
            raise PassportNotFoundError("Passport not found (in-memory store is empty)")
        return copy.deepcopy(self._passport)

    def save(self, passport: Passport) -> None:
        if self.fail_on_save:
            raise PersistError("Simulated Passport write failure")
        self._passport = copy.deepcopy(passport)
        self.save_count += 1

    @property
    def passport(self) -> Passport | None:
        """Direct view of the stored Passport (a copy)."""
        return copy.deepcopy(self._passport)

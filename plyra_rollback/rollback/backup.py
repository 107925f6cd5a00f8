"""
State Backup Manager
~~~~~~~~~~~~~~~~~~~~

Copies the configured files into a fresh, timestamped backup directory
before any destructive action, and writes a manifest describing it.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

from plyra_rollback.core.models import BackupManifest, ManifestEntry
from plyra_rollback.exceptions import BackupError

__all__ = ["StateBackupManager", "MANIFEST_FILENAME"]

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class StateBackupManager:
    """
    Snapshots project files matching a glob set.

    Relative paths are preserved under the backup directory and file
    timestamps are kept (``shutil.copy2``). A failed snapshot leaves its
    partial directory behind with ``complete: false`` in the manifest.

    Args:
        root: Project root the globs are expanded against.
        backup_root: Directory that receives one sub-directory per backup.
        globs: Default patterns used when ``snapshot`` is given none.
        clock: Source of the backup timestamp.
        copy_file: File copy primitive, ``shutil.copy2`` by default.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        backup_root: str | os.PathLike[str],
        globs: Iterable[str] = (),
        clock: Callable[[], datetime] | None = None,
        copy_file: Callable[[Path, Path], object] | None = None,
    ) -> None:
        self._root = Path(root).resolve()
        self._backup_root = Path(backup_root)
        if not self._backup_root.is_absolute():
            self._backup_root = self._root / self._backup_root
        self._globs = tuple(globs)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._copy_file = copy_file or shutil.copy2

    @property
    def backup_root(self) -> Path:
        return self._backup_root

    def snapshot(self, globs: Iterable[str] | None = None) -> BackupManifest:
        """
        Copy every file matching ``globs`` into a new backup directory.

        Args:
            globs: Patterns relative to the project root; the configured
                set is used when omitted.

        Returns:
            A complete BackupManifest.

        Raises:
            BackupError: If the directory cannot be created or any copy fails.
        """
        patterns = tuple(globs) if globs is not None else self._globs
        created_at = self._clock()
        backup_dir = self._create_backup_dir(created_at)
        manifest = BackupManifest(path=backup_dir, created_at=created_at, globs=patterns)

        try:
            for source in self._expand(patterns):
                relative = source.relative_to(self._root)
                destination = backup_dir / relative
                destination.parent.mkdir(parents=True, exist_ok=True)
                self._copy_file(source, destination)
                manifest.entries.append(
                    ManifestEntry(relative_path=relative.as_posix(), source_file=source)
                )
            manifest.complete = True
            self._write_manifest(manifest)
        except OSError as exc:
            manifest.complete = False
            self._write_manifest_best_effort(manifest)
            raise BackupError(
                f"backup failed: {exc}",
                backup_path=str(backup_dir),
                details={"copied": len(manifest.entries)},
            ) from exc

        logger.info(
            "Backed up %d file(s) to %s", len(manifest.entries), backup_dir
        )
        return manifest

    def list_backups(self) -> list[Path]:
        """Existing backup directories, newest first."""
        if not self._backup_root.is_dir():
            return []
        return sorted(
            (p for p in self._backup_root.iterdir() if p.is_dir()),
            reverse=True,
        )

    def _create_backup_dir(self, created_at: datetime) -> Path:
        stamp = created_at.strftime("%Y%m%dT%H%M%S%fZ")
        try:
            self._backup_root.mkdir(parents=True, exist_ok=True)
            suffix = 0
            while True:
                name = f"rollback-{stamp}" if suffix == 0 else f"rollback-{stamp}-{suffix}"
                candidate = self._backup_root / name
                try:
                    candidate.mkdir()
                    return candidate
                except FileExistsError:
                    suffix += 1
        except OSError as exc:
            raise BackupError(
                f"cannot create backup directory under {self._backup_root}: {exc}",
                backup_path=str(self._backup_root),
            ) from exc

    def _expand(self, patterns: Iterable[str]) -> list[Path]:
        """Matching files, de-duplicated, in a stable order."""
        seen: set[Path] = set()
        files: list[Path] = []
        for pattern in patterns:
            matched = 0
            for path in sorted(self._root.glob(pattern)):
                if not path.is_file() or self._is_excluded(path):
                    continue
                matched += 1
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                files.append(path)
            if matched == 0:
                logger.debug("Backup glob %r matched no files", pattern)
        return files

    def _is_excluded(self, path: Path) -> bool:
        backup_root = self._backup_root.resolve()
        resolved = path.resolve()
        return resolved == backup_root or backup_root in resolved.parents

    def _write_manifest(self, manifest: BackupManifest) -> None:
        with open(manifest.path / MANIFEST_FILENAME, "w", encoding="utf-8") as f:
            json.dump(manifest.to_dict(), f, indent=2)
            f.write("\n")

    def _write_manifest_best_effort(self, manifest: BackupManifest) -> None:
        try:
            self._write_manifest(manifest)
        except OSError as exc:
            logger.warning(
                "Could not write manifest for partial backup %s: %s", manifest.path, exc
            )

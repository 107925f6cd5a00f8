"""
plyra-rollback Custom Exceptions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

All custom exception classes for plyra-rollback, organized by pipeline
stage. Every distinct failure mode has its own exception type.

**Structured Error Messages**

Failures that leave the working tree in a state needing attention
(revert and verification) provide two structured fields:
- ``what_happened``: Clear plain-English description
- ``how_to_fix``: Concrete, actionable steps
"""

__all__ = [
    # Base
    "RollbackToolError",
    # Config
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    "ProjectRootError",
    # Registry
    "RegistryError",
    "PassportNotFoundError",
    "NotFoundError",
    # Pipeline stages
    "ConfirmationDeclinedError",
    "LockError",
    "BackupError",
    "RevertError",
    "VerificationError",
    # Persistence
    "PersistError",
]


# ── Formatting Helper ────────────────────────────────────────────────────────

_SEPARATOR = "─" * 52


def _format_structured_error(
    title: str,
    what_happened: str,
    how_to_fix: str,
) -> str:
    """Build a rich, structured error message."""
    lines = [
        f"  {title}",
        f"  {_SEPARATOR}",
        "  What happened:",
        *[f"    {line}" for line in what_happened.strip().splitlines()],
        "",
        "  How to fix:",
        *[f"    {line}" for line in how_to_fix.strip().splitlines()],
    ]
    return "\n".join(lines)


# ── Base Exception ───────────────────────────────────────────────────────────


class RollbackToolError(Exception):
    """Base exception for all plyra-rollback errors."""

    def __init__(self, message: str = "", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


# ── Config Exceptions ────────────────────────────────────────────────────────


class ConfigError(RollbackToolError):
    """Base exception for configuration-related errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when a configuration file cannot be found at the specified path."""


class ConfigValidationError(ConfigError):
    """Raised when configuration values fail validation."""


class ProjectRootError(ConfigError):
    """Raised when the tool is not invoked from the expected project root."""


# ── Registry Exceptions ──────────────────────────────────────────────────────


class RegistryError(RollbackToolError):
    """Raised when the rollback point registry is empty or unparseable."""


class PassportNotFoundError(ConfigError, RegistryError):
    """Raised when the Passport file does not exist."""


class NotFoundError(RollbackToolError):
    """Raised when no rollback point matches the requested target."""

    def __init__(
        self,
        message: str = "Rollback point not found",
        query: str = "",
        details: dict | None = None,
    ) -> None:
        self.query = query
        super().__init__(message, details)


# ── Pipeline Stage Exceptions ────────────────────────────────────────────────


class ConfirmationDeclinedError(RollbackToolError):
    """Raised when the user declines the rollback at the confirmation prompt."""


class LockError(RollbackToolError):
    """Raised when another rollback pipeline already holds the lock."""


class BackupError(RollbackToolError):
    """
    Raised when the pre-revert snapshot cannot be completed.

    ``backup_path`` points at the (possibly partial) backup directory,
    which is left on disk for inspection.
    """

    def __init__(
        self,
        message: str = "Backup failed",
        backup_path: str = "",
        details: dict | None = None,
    ) -> None:
        self.backup_path = backup_path
        super().__init__(message, details)


class RevertError(RollbackToolError):
    """
    Raised when the version-control revert exits non-zero or times out.

    Structured fields:
    - ``what_happened``: description of the failed revert
    - ``how_to_fix``: actionable remediation steps
    """

    def __init__(
        self,
        message: str = "Revert failed",
        ref: str = "",
        exit_status: int | None = None,
        output: str = "",
        backup_path: str = "",
        details: dict | None = None,
        what_happened: str = "",
        how_to_fix: str = "",
    ) -> None:
        self.ref = ref
        self.exit_status = exit_status
        self.output = output
        self.backup_path = backup_path
        status = "timed out" if exit_status is None else f"exited {exit_status}"
        self.what_happened = what_happened or (
            f'Reverting to "{ref}" {status}. The working tree keeps its '
            f"pre-revert version-control state."
        )
        self.how_to_fix = how_to_fix or (
            f'1. Check that "{ref}" exists: git cat-file -t {ref}\n'
            f"2. Resolve local conditions blocking the revert (index lock, permissions)\n"
            f"3. Files captured before the attempt are in: {backup_path or '(no backup)'}"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"RevertError: {self.args[0]}",
            what_happened=self.what_happened,
            how_to_fix=self.how_to_fix,
        )


class VerificationError(RollbackToolError):
    """
    Raised when the post-revert test run exits non-zero or times out.

    The working tree is left reverted; nothing is re-reverted automatically.

    Structured fields:
    - ``what_happened``: description of the failed verification
    - ``how_to_fix``: manual recovery steps
    """

    def __init__(
        self,
        message: str = "Verification failed",
        exit_status: int | None = None,
        output: str = "",
        backup_path: str = "",
        details: dict | None = None,
        what_happened: str = "",
        how_to_fix: str = "",
    ) -> None:
        self.exit_status = exit_status
        self.output = output
        self.backup_path = backup_path
        status = "timed out" if exit_status is None else f"exited {exit_status}"
        self.what_happened = what_happened or (
            f"The test command {status} after the revert. The working tree "
            f"is reverted but unverified and the rollback was not recorded."
        )
        self.how_to_fix = how_to_fix or (
            "1. Inspect the test output above and fix or re-run the suite\n"
            f"2. Restore pre-rollback files from: {backup_path or '(no backup)'}\n"
            "3. Or return to the previous commit with: git reset --hard ORIG_HEAD"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"VerificationError: {self.args[0]}",
            what_happened=self.what_happened,
            how_to_fix=self.how_to_fix,
        )


# ── Persistence Exceptions ───────────────────────────────────────────────────


class PersistError(RollbackToolError):
    """Raised when the Passport cannot be written back."""

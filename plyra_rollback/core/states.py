"""
Pipeline State Enum
~~~~~~~~~~~~~~~~~~~

States of the recovery pipeline and the transitions allowed between them.
"""

from enum import StrEnum

__all__ = ["PipelineState"]


class PipelineState(StrEnum):
    """
    Position of a recovery run in the pipeline.

    - IDLE: Nothing has happened yet.
    - RESOLVING_TARGET: Looking up the requested rollback point.
    - CONFIRMING_INTENT: Waiting for the user to approve (interactive only).
    - BACKING_UP: Copying configured files to a fresh backup directory.
    - REVERTING: Running the version-control revert.
    - VERIFYING: Running the test command against the reverted tree.
    - LEDGER_UPDATED: Terminal success; the rollback was recorded.
    - REPORTED: Terminal dry-run outcome; nothing was changed.
    - ABORTED: Terminal failure; later steps were not performed.
    """

    IDLE = "IDLE"
    RESOLVING_TARGET = "RESOLVING_TARGET"
    CONFIRMING_INTENT = "CONFIRMING_INTENT"
    BACKING_UP = "BACKING_UP"
    REVERTING = "REVERTING"
    VERIFYING = "VERIFYING"
    LEDGER_UPDATED = "LEDGER_UPDATED"
    REPORTED = "REPORTED"
    ABORTED = "ABORTED"

    def is_terminal(self) -> bool:
        """Return True if no further transition is possible."""
        return self in (
            PipelineState.LEDGER_UPDATED,
            PipelineState.REPORTED,
            PipelineState.ABORTED,
        )

    def is_success(self) -> bool:
        """Return True for the terminal states that exit with status 0."""
        return self in (PipelineState.LEDGER_UPDATED, PipelineState.REPORTED)

    def can_transition_to(self, target: "PipelineState") -> bool:
        """Check whether moving from this state to ``target`` is allowed."""
        if self.is_terminal():
            return False
        if target is PipelineState.ABORTED:
            return True
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.RESOLVING_TARGET}),
    PipelineState.RESOLVING_TARGET: frozenset(
        {
            PipelineState.CONFIRMING_INTENT,
            PipelineState.BACKING_UP,
            PipelineState.REPORTED,
        }
    ),
    PipelineState.CONFIRMING_INTENT: frozenset({PipelineState.BACKING_UP}),
    PipelineState.BACKING_UP: frozenset({PipelineState.REVERTING}),
    PipelineState.REVERTING: frozenset({PipelineState.VERIFYING}),
    PipelineState.VERIFYING: frozenset({PipelineState.LEDGER_UPDATED}),
}

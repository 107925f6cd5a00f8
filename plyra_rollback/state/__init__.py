"""Persisted state: the Passport store and the pipeline lock."""

from plyra_rollback.state.lock import PipelineLock
from plyra_rollback.state.store import (
    InMemoryPassportStore,
    JsonPassportStore,
    PassportDocument,
    PassportStore,
)

__all__ = [
    "PassportStore",
    "JsonPassportStore",
    "InMemoryPassportStore",
    "PassportDocument",
    "PipelineLock",
]

"""
Rollback Point Registry
~~~~~~~~~~~~~~~~~~~~~~~

Loads the known rollback points from the Passport and resolves a
user-supplied target (``latest``, an exact id, or a description
substring) to one of them.
"""

from __future__ import annotations

import logging

from plyra_rollback.core.models import Passport, RollbackPoint
from plyra_rollback.exceptions import NotFoundError, RegistryError
from plyra_rollback.state.store import PassportStore

__all__ = ["RollbackPointRegistry", "LATEST"]

logger = logging.getLogger(__name__)

LATEST = "latest"


class RollbackPointRegistry:
    """
    Read access to the rollback points, ordered most-recent-first.

    Lookup precedence for ``resolve``: the literal ``latest``, then an
    exact id match, then a case-sensitive description substring match.
    Within each tier the first point in registry order wins.
    """

    def __init__(self, store: PassportStore) -> None:
        self._store = store

    def load(self) -> list[RollbackPoint]:
        """
        Load every known rollback point.

        Raises:
            RegistryError: If the Passport is missing or unparseable.
        """
        points = list(self._store.load().rollback_points)
        logger.debug("Loaded %d rollback point(s)", len(points))
        return points

    def resolve(self, query: str) -> RollbackPoint:
        """
        Resolve ``query`` to a rollback point.

        Args:
            query: ``"latest"``, a point id, or part of a description.

        Returns:
            The matching RollbackPoint.

        Raises:
            RegistryError: If the registry is empty or cannot be loaded.
            NotFoundError: If nothing in a non-empty registry matches.
        """
        points = self.load()
        if not points:
            raise RegistryError("no rollback points found")

        if query == LATEST:
            return points[0]

        if query:
            for point in points:
                if point.id == query:
                    return point
            for point in points:
                if query in point.description:
                    return point

        raise NotFoundError(
            f"rollback point not found: {query!r}",
            query=query,
            details={"available": [p.id for p in points]},
        )

    def record(self, point: RollbackPoint) -> None:
        """
        Register a new rollback point as the most recent one.

        Creates the Passport if none exists yet.

        Raises:
            RegistryError: If a point with the same id already exists.
            PersistError: If the Passport cannot be written.
        """
        passport = self._store.load() if self._store.exists() else Passport()
        if any(p.id == point.id for p in passport.rollback_points):
            raise RegistryError(f"rollback point already registered: {point.id}")
        passport.rollback_points.insert(0, point)
        self._store.save(passport)
        logger.debug("Registered rollback point %s", point.id)

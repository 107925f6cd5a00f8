"""Tests for the rollback point registry."""

from datetime import UTC, datetime

import pytest

from plyra_rollback import InMemoryPassportStore, Passport, RollbackPoint
from plyra_rollback.exceptions import (
    ConfigError,
    NotFoundError,
    PassportNotFoundError,
    RegistryError,
)
from plyra_rollback.rollback.registry import RollbackPointRegistry


@pytest.fixture
def registry(sample_points) -> RollbackPointRegistry:
    return RollbackPointRegistry(InMemoryPassportStore(Passport(rollback_points=sample_points)))


class TestResolve:
    """Tests for target resolution."""

    def test_latest_returns_first_point(self, registry, sample_points):
        assert registry.resolve("latest") == sample_points[0]

    def test_latest_on_single_point_registry(self, store, initial_point):
        assert RollbackPointRegistry(store).resolve("latest") == initial_point

    def test_exact_id_match(self, registry):
        assert registry.resolve("beef002").description == "before payment migration"

    def test_description_substring_match(self, registry):
        assert registry.resolve("payment").id == "beef002"

    def test_substring_match_is_case_sensitive(self, registry):
        with pytest.raises(NotFoundError):
            registry.resolve("PAYMENT")

    def test_first_description_match_in_registry_order_wins(self, registry):
        # "e" occurs in every description; the most recent point wins
        assert registry.resolve("e").id == "f00d003"

    def test_exact_id_beats_earlier_description_match(self):
        points = [
            RollbackPoint(
                id="newer",
                description="rollback before abc123 was reverted",
                created_at=datetime(2025, 10, 2, tzinfo=UTC),
            ),
            RollbackPoint(
                id="abc123",
                description="initial_state",
                created_at=datetime(2025, 9, 26, tzinfo=UTC),
            ),
        ]
        registry = RollbackPointRegistry(InMemoryPassportStore(Passport(rollback_points=points)))
        assert registry.resolve("abc123").id == "abc123"

    def test_unknown_target_raises_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.resolve("does-not-exist")
        assert exc_info.value.query == "does-not-exist"
        assert "f00d003" in exc_info.value.details["available"]

    def test_empty_query_raises_not_found(self, registry):
        with pytest.raises(NotFoundError):
            registry.resolve("")

    def test_empty_registry_raises_registry_error(self):
        registry = RollbackPointRegistry(InMemoryPassportStore(Passport()))
        with pytest.raises(RegistryError, match="no rollback points found"):
            registry.resolve("latest")

    def test_empty_registry_is_not_a_not_found(self):
        registry = RollbackPointRegistry(InMemoryPassportStore(Passport()))
        with pytest.raises(RegistryError) as exc_info:
            registry.resolve("abc123")
        assert not isinstance(exc_info.value, NotFoundError)


class TestLoad:
    """Tests for loading the registry."""

    def test_load_preserves_order(self, registry, sample_points):
        assert registry.load() == sample_points

    def test_missing_passport_is_registry_and_config_error(self):
        registry = RollbackPointRegistry(InMemoryPassportStore())
        with pytest.raises(PassportNotFoundError) as exc_info:
            registry.load()
        assert isinstance(exc_info.value, RegistryError)
        assert isinstance(exc_info.value, ConfigError)


class TestRecord:
    """Tests for registering new rollback points."""

    def test_record_inserts_as_most_recent(self, store, initial_point):
        registry = RollbackPointRegistry(store)
        point = RollbackPoint(
            id="d00d004",
            description="before hotfix",
            created_at=datetime(2025, 10, 5, tzinfo=UTC),
        )
        registry.record(point)
        assert registry.resolve("latest") == point
        assert registry.load()[1] == initial_point

    def test_record_duplicate_id_raises(self, store, initial_point):
        registry = RollbackPointRegistry(store)
        with pytest.raises(RegistryError, match="already registered"):
            registry.record(initial_point)

    def test_record_creates_missing_passport(self):
        store = InMemoryPassportStore()
        registry = RollbackPointRegistry(store)
        point = RollbackPoint(
            id="first01",
            description="first checkpoint",
            created_at=datetime(2025, 10, 5, tzinfo=UTC),
        )
        registry.record(point)
        assert store.exists()
        assert registry.load() == [point]

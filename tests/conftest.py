"""Pytest configuration and fixtures for neo-membership tests."""

import pytest
from unittest.mock import AsyncMock

from neo_membership.features.cache.services.membership_cache import MembershipCache
from neo_membership.features.groups.entities.group import Group
from neo_membership.features.groups.repositories.memory_repository import InMemoryMembershipRepository
from neo_membership.features.membership.services.membership_service import MembershipService


NOW = 2500


@pytest.fixture
def now():
    """Fixed current time in epoch seconds."""
    return NOW


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    """Clock starting at the fixed current time; tests may move it."""
    return FakeClock()


@pytest.fixture
def board():
    return Group(id=5, name_base="Board")


@pytest.fixture
def committee():
    return Group(id=7, name_base="Committee", parent=5)


@pytest.fixture
def chapter():
    """Parameterized group rendered from its membership arguments."""
    return Group(
        id=11,
        name_base="Chapter",
        name_display="Chapter $1 ($2)",
        args=("city", "country"),
    )


@pytest.fixture
def category():
    """Group that only exists to hold other groups."""
    return Group(id=20, name_base="Regions", members_allowed=False)


@pytest.fixture
def repository(board, committee, chapter, category):
    """In-memory repository preloaded with the sample groups."""
    return InMemoryMembershipRepository([board, committee, chapter, category])


@pytest.fixture
def cache(clock):
    return MembershipCache(clock=clock)


@pytest.fixture
def service(repository, cache, clock):
    """Membership service over the in-memory repository."""
    return MembershipService(repository, cache=cache, clock=clock)


@pytest.fixture
def mock_database():
    """Mock DatabaseManager for repository tests."""
    mock_db = AsyncMock()
    mock_db.fetch = AsyncMock(return_value=[])
    mock_db.execute = AsyncMock(return_value="UPDATE 1")
    return mock_db

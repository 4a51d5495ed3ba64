"""Tests for the PostgreSQL membership repository."""

import asyncio

import asyncpg
import pytest
from unittest.mock import AsyncMock, MagicMock

from neo_membership.config.settings import MembershipSettings
from neo_membership.core.exceptions import ConfigurationError, RepositoryUnavailableError
from neo_membership.features.database.services.database_service import DatabaseManager
from neo_membership.features.groups.entities.membership import DirectMembership
from neo_membership.features.groups.repositories.asyncpg_repository import AsyncPGMembershipRepository


def group_row(**overrides):
    row = {
        "id": 7,
        "name_base": "Committee",
        "name_display": None,
        "parent": 5,
        "public": 1,
        "searchable": 0,
        "members_allowed": 1,
        "args": None,
    }
    row.update(overrides)
    return row


class TestAsyncPGMembershipRepository:
    """Test query construction and row mapping."""

    @pytest.fixture
    def repository(self, mock_database):
        return AsyncPGMembershipRepository(mock_database)

    def test_requires_database(self):
        with pytest.raises(ValueError):
            AsyncPGMembershipRepository(None)

    @pytest.mark.asyncio
    async def test_get_direct_memberships(self, repository, mock_database):
        mock_database.fetch.return_value = [
            {"group_id": 5, "from": 1000, "to": None, "user_args": None, "group_args": None},
            {"group_id": 11, "from": 2000, "to": 3000, "user_args": "Berlin,Germany", "group_args": "city,country"},
        ]

        rows = await repository.get_direct_memberships(1)

        assert rows == [
            DirectMembership(group_id=5, time_from=1000),
            DirectMembership(
                group_id=11,
                time_from=2000,
                time_to=3000,
                user_args="Berlin,Germany",
                group_args="city,country",
            ),
        ]
        query, user_id = mock_database.fetch.call_args.args
        assert "users_groups" in query
        assert user_id == 1

    @pytest.mark.asyncio
    async def test_get_groups_by_ids_batches(self, repository, mock_database):
        mock_database.fetch.return_value = [
            group_row(),
            group_row(id=11, name_base="Chapter", name_display="Chapter $1", parent=None, args="city"),
        ]

        groups = await repository.get_groups_by_ids({11, 7})

        mock_database.fetch.assert_awaited_once()
        query, ids = mock_database.fetch.call_args.args
        assert "ANY($1::int[])" in query
        assert ids == [7, 11]

        committee, chapter = groups
        assert committee.parent == 5
        assert committee.is_public is True
        assert committee.searchable is False
        assert committee.members_allowed is True
        assert chapter.args == ("city",)

    @pytest.mark.asyncio
    async def test_malformed_group_labels_ignored(self, repository, mock_database):
        mock_database.fetch.return_value = [group_row(args='"broken')]

        groups = await repository.get_groups_by_ids({7})

        assert groups[0].args == ()

    @pytest.mark.asyncio
    async def test_empty_ids_skip_query(self, repository, mock_database):
        assert await repository.get_groups_by_ids(set()) == []
        assert await repository.get_permissions_for_groups(set()) == []
        mock_database.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_permissions_for_groups(self, repository, mock_database):
        mock_database.fetch.return_value = [{"permission": "reports.*"}, {"permission": "users.read"}]

        permissions = await repository.get_permissions_for_groups({3, 1, 2})

        assert permissions == ["reports.*", "users.read"]
        query, ids = mock_database.fetch.call_args.args
        assert "groups_permissions" in query
        assert ids == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_permissions_for_user(self, repository, mock_database):
        mock_database.fetch.return_value = [{"permission": "profile.edit"}]

        assert await repository.get_permissions_for_user(9) == ["profile.edit"]
        assert "users_permissions" in mock_database.fetch.call_args.args[0]

    @pytest.mark.asyncio
    async def test_insert_membership_encodes_args(self, repository, mock_database):
        await repository.insert_membership(1, 11, ["Washington, D.C.", "USA"], 2500, None)

        args = mock_database.execute.call_args.args
        assert "INSERT INTO users_groups" in args[0]
        assert args[1:] == (1, 11, '"Washington, D.C.",USA', 2500, None)

    @pytest.mark.asyncio
    async def test_end_membership(self, repository, mock_database):
        await repository.end_membership(1, 5, 2499)

        query, *params = mock_database.execute.call_args.args
        assert query.strip().startswith("UPDATE users_groups")
        assert params == [1, 5, 2499]

    @pytest.mark.asyncio
    async def test_driver_errors_wrapped(self, repository, mock_database):
        mock_database.fetch.side_effect = asyncpg.PostgresError("relation does not exist")

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await repository.get_groups_by_ids({1})

        assert isinstance(exc_info.value.__cause__, asyncpg.PostgresError)

    @pytest.mark.asyncio
    async def test_connection_errors_wrapped(self, repository, mock_database):
        mock_database.execute.side_effect = ConnectionRefusedError()

        with pytest.raises(RepositoryUnavailableError):
            await repository.end_membership(1, 5, 2499)

    @pytest.mark.asyncio
    async def test_closed_pool_wrapped(self, repository, mock_database):
        mock_database.fetch.side_effect = asyncpg.InterfaceError("pool is closed")

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await repository.get_direct_memberships(1)

        assert isinstance(exc_info.value.__cause__, asyncpg.InterfaceError)
        assert exc_info.value.details == {"operation": "load memberships of user 1"}

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self, repository, mock_database):
        mock_database.execute.side_effect = asyncio.TimeoutError()

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await repository.insert_membership(1, 11, None, 2500, None)

        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


class TestDatabaseManager:
    """Test connection management."""

    def test_strips_driver_suffix(self):
        manager = DatabaseManager("postgresql+asyncpg://localhost/membership")
        assert manager.dsn == "postgresql://localhost/membership"

    def test_from_settings(self):
        manager = DatabaseManager.from_settings(MembershipSettings(
            database_url="postgresql://localhost/membership",
            db_pool_max_size=4,
        ))

        assert manager.pool_config["max_size"] == 4
        assert manager.pool is None

    def test_from_settings_requires_url(self):
        with pytest.raises(ConfigurationError):
            DatabaseManager.from_settings(MembershipSettings(database_url=None))

    @pytest.mark.asyncio
    async def test_health_check(self):
        connection = MagicMock()
        connection.fetchval = AsyncMock(return_value=1)
        pool = MagicMock()
        pool.acquire.return_value.__aenter__ = AsyncMock(return_value=connection)
        pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)

        manager = DatabaseManager("postgresql://localhost/membership")
        manager.pool = pool

        assert await manager.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self):
        pool = MagicMock()
        pool.acquire.return_value.__aenter__ = AsyncMock(side_effect=OSError("connection refused"))
        pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)

        manager = DatabaseManager("postgresql://localhost/membership")
        manager.pool = pool

        assert await manager.health_check() is False

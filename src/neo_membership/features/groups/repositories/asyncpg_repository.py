"""Concrete MembershipRepository implementation using AsyncPG."""

import asyncio
import logging
from typing import Any, List, Optional, Sequence, Set

import asyncpg

from ....config.constants import DisplayNameSyntax, TableNames
from ....core.exceptions import MalformedArgsError, RepositoryUnavailableError
from ...database.services.database_service import DatabaseManager
from ..entities.group import Group
from ..entities.membership import DirectMembership
from ..entities.protocols import MembershipRepository
from ..services.display_name import decode_args, encode_args

logger = logging.getLogger(__name__)


class AsyncPGMembershipRepository(MembershipRepository):
    """PostgreSQL membership repository with batched group and permission lookups."""

    def __init__(
        self,
        database: DatabaseManager,
        delimiter: str = DisplayNameSyntax.DEFAULT_ARGS_DELIMITER
    ):
        """Initialize repository with a database manager."""
        if not database:
            raise ValueError("Database manager is required")
        self.database = database
        self.delimiter = delimiter

    async def _fetch(self, operation: str, query: str, *args: Any) -> List[asyncpg.Record]:
        try:
            return await self.database.fetch(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Failed to {operation}: {e}")
            raise RepositoryUnavailableError(
                f"Membership lookup failed: {operation}",
                details={"operation": operation}
            ) from e

    async def _execute(self, operation: str, query: str, *args: Any) -> str:
        try:
            return await self.database.execute(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Failed to {operation}: {e}")
            raise RepositoryUnavailableError(
                f"Membership update failed: {operation}",
                details={"operation": operation}
            ) from e

    def _row_to_group(self, row: asyncpg.Record) -> Group:
        try:
            labels = decode_args(row["args"], self.delimiter)
        except MalformedArgsError:
            logger.warning(f"Group {row['id']} has malformed argument labels")
            labels = []

        return Group(
            id=row["id"],
            name_base=row["name_base"],
            name_display=row["name_display"],
            parent=row["parent"],
            members_allowed=bool(row["members_allowed"]),
            is_public=bool(row["public"]),
            searchable=bool(row["searchable"]),
            args=tuple(labels),
        )

    async def get_direct_memberships(self, user_id: int) -> List[DirectMembership]:
        """Get every stored membership row of a user."""
        rows = await self._fetch(
            f"load memberships of user {user_id}",
            f"""
            SELECT ug.group_id, ug."from", ug."to",
                   ug.args AS user_args, g.args AS group_args
            FROM {TableNames.USERS_GROUPS} ug
            LEFT JOIN {TableNames.GROUPS} g ON g.id = ug.group_id
            WHERE ug.user_id = $1
            ORDER BY ug."from" ASC
            """,
            user_id
        )

        memberships = [
            DirectMembership(
                group_id=row["group_id"],
                time_from=row["from"],
                time_to=row["to"],
                user_args=row["user_args"],
                group_args=row["group_args"],
            )
            for row in rows
        ]
        logger.debug(f"Found {len(memberships)} membership rows for user {user_id}")
        return memberships

    async def get_groups_by_ids(self, ids: Set[int]) -> List[Group]:
        """Get groups by id in one query."""
        if not ids:
            return []

        rows = await self._fetch(
            f"load {len(ids)} groups",
            f"""
            SELECT id, name_base, name_display, parent, public,
                   searchable, members_allowed, args
            FROM {TableNames.GROUPS}
            WHERE id = ANY($1::int[])
            """,
            sorted(ids)
        )
        return [self._row_to_group(row) for row in rows]

    async def get_permissions_for_groups(self, ids: Set[int]) -> List[str]:
        """Get permission strings granted to any of the groups."""
        if not ids:
            return []

        rows = await self._fetch(
            f"load permissions of {len(ids)} groups",
            f"""
            SELECT DISTINCT permission
            FROM {TableNames.GROUPS_PERMISSIONS}
            WHERE group_id = ANY($1::int[])
            """,
            sorted(ids)
        )
        return [row["permission"] for row in rows]

    async def get_permissions_for_user(self, user_id: int) -> List[str]:
        """Get permission strings granted to the user individually."""
        rows = await self._fetch(
            f"load permissions of user {user_id}",
            f"""
            SELECT DISTINCT permission
            FROM {TableNames.USERS_PERMISSIONS}
            WHERE user_id = $1
            """,
            user_id
        )
        return [row["permission"] for row in rows]

    async def insert_membership(
        self,
        user_id: int,
        group_id: int,
        args: Optional[Sequence[str]],
        time_from: int,
        time_to: Optional[int]
    ) -> None:
        """Store a new membership row."""
        await self._execute(
            f"add user {user_id} to group {group_id}",
            f"""
            INSERT INTO {TableNames.USERS_GROUPS} (user_id, group_id, args, "from", "to")
            VALUES ($1, $2, $3, $4, $5)
            """,
            user_id, group_id, encode_args(list(args) if args else None, self.delimiter),
            time_from, time_to
        )
        logger.info(f"Inserted membership of user {user_id} in group {group_id}")

    async def end_membership(self, user_id: int, group_id: int, end_time: int) -> None:
        """End the user's open memberships in a group."""
        status = await self._execute(
            f"end membership of user {user_id} in group {group_id}",
            f"""
            UPDATE {TableNames.USERS_GROUPS}
            SET "to" = $3
            WHERE user_id = $1 AND group_id = $2
            AND ("to" IS NULL OR "to" > $3)
            """,
            user_id, group_id, end_time
        )
        logger.info(f"Ended membership of user {user_id} in group {group_id} ({status})")

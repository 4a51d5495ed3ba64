"""Membership service for business logic orchestration.

Entry point for consumers: resolves a user's groups and permissions through
the per-user cache, answers permission checks, and records membership
changes. Every write invalidates the user's cache entry and, when a bus is
configured, tells other processes to do the same.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from ....config.settings import MembershipSettings, get_settings
from ....core.exceptions import GroupNotFoundError, PermissionDeniedError
from ....config.constants import RefusalReason
from ...cache.services.membership_cache import MembershipCache
from ...cache.services.redis_invalidation import RedisInvalidationBus
from ...database.services.database_service import DatabaseManager
from ...groups.entities.group import Group
from ...groups.entities.membership import MembershipRefusal, ResolvedMembership
from ...groups.entities.protocols import MembershipRepository
from ...groups.repositories.asyncpg_repository import AsyncPGMembershipRepository
from ...groups.services.display_name import DisplayNameRenderer
from ...groups.services.hierarchy_expander import GroupHierarchyExpander
from ...groups.services.validity_merger import system_clock
from ...permissions.entities.permission_tree import PermissionTree
from ...permissions.services.permission_aggregator import PermissionAggregator

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class MembershipService:
    """Service orchestrating membership resolution, permission checks and writes."""

    def __init__(
        self,
        repository: MembershipRepository,
        cache: Optional[MembershipCache] = None,
        expander: Optional[GroupHierarchyExpander] = None,
        aggregator: Optional[PermissionAggregator] = None,
        clock: Optional[Clock] = None,
        invalidation_bus: Optional[RedisInvalidationBus] = None
    ):
        self.repository = repository
        self.clock = clock if clock is not None else system_clock
        self.cache = cache if cache is not None else MembershipCache(clock=self.clock)
        self.expander = expander if expander is not None else GroupHierarchyExpander(repository)
        self.aggregator = aggregator if aggregator is not None else PermissionAggregator(repository)
        self.invalidation_bus = invalidation_bus

    @classmethod
    def from_settings(
        cls,
        settings: Optional[MembershipSettings] = None,
        database: Optional[DatabaseManager] = None,
        invalidation_bus: Optional[RedisInvalidationBus] = None
    ) -> "MembershipService":
        """Wire a PostgreSQL-backed service from settings.

        The invalidation bus is created from ``redis_url`` when one is
        configured and no bus is passed in.
        """
        settings = settings or get_settings()
        database = database or DatabaseManager.from_settings(settings)
        repository = AsyncPGMembershipRepository(database, settings.args_delimiter)

        if invalidation_bus is None and settings.redis_url:
            invalidation_bus = RedisInvalidationBus.from_settings(settings)

        return cls(
            repository,
            cache=MembershipCache(settings.cache_max_age_seconds),
            expander=GroupHierarchyExpander(
                repository,
                renderer=DisplayNameRenderer(settings.args_delimiter)
            ),
            invalidation_bus=invalidation_bus,
        )

    # Resolution

    async def resolve_groups(self, user_id: int) -> Dict[int, ResolvedMembership]:
        """Every group the user reaches, directly or through ancestors."""
        return await self.cache.get_groups(user_id, lambda now: self._load_groups(user_id, now))

    async def get_active_groups(self, user_id: int) -> Dict[int, ResolvedMembership]:
        """Only the memberships that are active right now."""
        groups = await self.resolve_groups(user_id)
        return {group_id: membership for group_id, membership in groups.items() if membership.active}

    async def resolve_permissions(self, user_id: int) -> PermissionTree:
        """The user's compiled permission tree."""
        return await self.cache.get_permissions(
            user_id,
            lambda now: self._load_groups(user_id, now),
            lambda groups: self.aggregator.resolve(user_id, groups)
        )

    async def _load_groups(self, user_id: int, now: int) -> Dict[int, ResolvedMembership]:
        rows = await self.repository.get_direct_memberships(user_id)
        return await self.expander.expand(rows, now)

    # Permission checks

    async def has_permission(self, user_id: int, permission: str) -> bool:
        tree = await self.resolve_permissions(user_id)
        return tree.has(permission)

    async def has_all_permissions(self, user_id: int, permissions: Sequence[str]) -> bool:
        tree = await self.resolve_permissions(user_id)
        return all(tree.has(permission) for permission in permissions)

    async def has_any_permission(self, user_id: int, permissions: Sequence[str]) -> bool:
        tree = await self.resolve_permissions(user_id)
        return any(tree.has(permission) for permission in permissions)

    async def require_permissions(self, user_id: int, *permissions: str) -> None:
        """Raise unless the user holds every given permission.

        Raises:
            PermissionDeniedError: Naming the first missing permission
        """
        tree = await self.resolve_permissions(user_id)
        for permission in permissions:
            if not tree.has(permission):
                logger.info(f"User {user_id} denied permission: {permission}")
                raise PermissionDeniedError(user_id, permission)

    # Membership writes

    async def add_to_group_by_id(
        self,
        user_id: int,
        group_id: int,
        args: Optional[List[str]] = None,
        time_from: Optional[int] = None,
        time_to: Optional[int] = None
    ) -> Union[ResolvedMembership, MembershipRefusal]:
        """Add a user to a group looked up by id.

        Raises:
            GroupNotFoundError: If the group does not exist
        """
        groups = await self.repository.get_groups_by_ids({group_id})
        group = next((group for group in groups if group.id == group_id), None)
        if group is None:
            raise GroupNotFoundError(group_id)
        return await self.add_to_group(user_id, group, args, time_from, time_to)

    async def add_to_group(
        self,
        user_id: int,
        group: Group,
        args: Optional[List[str]] = None,
        time_from: Optional[int] = None,
        time_to: Optional[int] = None
    ) -> Union[ResolvedMembership, MembershipRefusal]:
        """Add a user to a group.

        Args:
            user_id: The user
            group: Target group
            args: Values for the group's display-name placeholders
            time_from: Start of the membership, defaults to now
            time_to: End of the membership, None for open-ended

        Returns:
            The user's resolved membership in the group, or a refusal if the
            group does not accept direct members
        """
        if not group.members_allowed:
            logger.info(f"Refused adding user {user_id} to group {group.id}: members not allowed")
            return MembershipRefusal(group.id, RefusalReason.MEMBERS_NOT_ALLOWED)

        if time_from is None:
            time_from = self.clock()

        await self.repository.insert_membership(user_id, group.id, args, time_from, time_to)
        logger.info(f"Added user {user_id} to group {group.id}")
        await self._invalidate(user_id)

        groups = await self.resolve_groups(user_id)
        membership = groups.get(group.id)
        if membership is None:
            raise GroupNotFoundError(group.id)
        return membership

    async def end_group_membership_by_id(self, user_id: int, group_id: int) -> bool:
        """End the user's direct membership in a group looked up by id."""
        return await self._end_membership(user_id, group_id)

    async def end_group_membership(self, user_id: int, group: Group) -> bool:
        """End the user's direct membership in a group.

        Returns:
            False if the user holds no active direct membership in the group
        """
        return await self._end_membership(user_id, group.id)

    async def _end_membership(self, user_id: int, group_id: int) -> bool:
        now = self.clock()
        rows = await self.repository.get_direct_memberships(user_id)
        if not any(row.group_id == group_id and row.window.is_active(now) for row in rows):
            logger.debug(f"User {user_id} has no active direct membership in group {group_id}")
            return False

        # End times are inclusive, so close the window one second before now
        await self.repository.end_membership(user_id, group_id, now - 1)
        logger.info(f"Ended membership of user {user_id} in group {group_id}")
        await self._invalidate(user_id)
        return True

    async def _invalidate(self, user_id: int) -> None:
        self.cache.invalidate(user_id)
        if self.invalidation_bus is not None:
            await self.invalidation_bus.publish(user_id)

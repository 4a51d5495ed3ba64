"""Permission aggregation over resolved group memberships."""

import logging
from typing import Dict

from ...groups.entities.membership import ResolvedMembership
from ...groups.entities.protocols import MembershipRepository
from ..entities.permission_tree import PermissionTree

logger = logging.getLogger(__name__)


class PermissionAggregator:
    """Compiles a user's permission tree.

    Permissions come from every active group the user reaches, directly or
    through inheritance, plus the grants made to the user individually.
    """

    def __init__(self, repository: MembershipRepository):
        self.repository = repository

    async def resolve(
        self,
        user_id: int,
        groups: Dict[int, ResolvedMembership]
    ) -> PermissionTree:
        """Build the permission tree for a user.

        Args:
            user_id: The user
            groups: The user's resolved memberships

        Returns:
            Compiled permission tree
        """
        active_ids = {group_id for group_id, membership in groups.items() if membership.active}

        group_permissions = []
        if active_ids:
            group_permissions = await self.repository.get_permissions_for_groups(active_ids)
        user_permissions = await self.repository.get_permissions_for_user(user_id)

        tree = PermissionTree.from_permissions(group_permissions)
        for permission in user_permissions:
            tree.grant(permission)

        logger.debug(
            f"Compiled permissions for user {user_id}: "
            f"{len(group_permissions)} from {len(active_ids)} active groups, "
            f"{len(user_permissions)} individual"
        )
        return tree

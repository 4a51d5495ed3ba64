"""In-memory MembershipRepository for tests, fixtures and local development."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ....config.constants import DisplayNameSyntax
from ..entities.group import Group
from ..entities.membership import DirectMembership
from ..entities.protocols import MembershipRepository
from ..services.display_name import encode_args

logger = logging.getLogger(__name__)


class InMemoryMembershipRepository(MembershipRepository):
    """Dict-backed repository.

    Every batched group lookup is recorded in ``group_lookups`` so callers
    can observe how many round trips a resolution needs.
    """

    def __init__(
        self,
        groups: Optional[Iterable[Group]] = None,
        delimiter: str = DisplayNameSyntax.DEFAULT_ARGS_DELIMITER
    ):
        self.groups: Dict[int, Group] = {group.id: group for group in groups or ()}
        self.memberships: Dict[int, List[DirectMembership]] = {}
        self.group_permissions: Dict[int, List[str]] = {}
        self.user_permissions: Dict[int, List[str]] = {}
        self.group_lookups: List[Set[int]] = []
        self.delimiter = delimiter

    # Fixture helpers

    def add_group(self, group: Group) -> Group:
        self.groups[group.id] = group
        return group

    def add_membership(
        self,
        user_id: int,
        group_id: int,
        time_from: int,
        time_to: Optional[int] = None,
        user_args: Optional[str] = None
    ) -> DirectMembership:
        group = self.groups.get(group_id)
        row = DirectMembership(
            group_id=group_id,
            time_from=time_from,
            time_to=time_to,
            user_args=user_args,
            group_args=encode_args(list(group.args), self.delimiter) if group else None,
        )
        self.memberships.setdefault(user_id, []).append(row)
        return row

    def grant_group(self, group_id: int, *permissions: str) -> None:
        self.group_permissions.setdefault(group_id, []).extend(permissions)

    def grant_user(self, user_id: int, *permissions: str) -> None:
        self.user_permissions.setdefault(user_id, []).extend(permissions)

    # MembershipRepository

    async def get_direct_memberships(self, user_id: int) -> List[DirectMembership]:
        return list(self.memberships.get(user_id, []))

    async def get_groups_by_ids(self, ids: Set[int]) -> List[Group]:
        self.group_lookups.append(set(ids))
        return [self.groups[group_id] for group_id in sorted(ids) if group_id in self.groups]

    async def get_permissions_for_groups(self, ids: Set[int]) -> List[str]:
        permissions: List[str] = []
        for group_id in sorted(ids):
            permissions.extend(self.group_permissions.get(group_id, []))
        return permissions

    async def get_permissions_for_user(self, user_id: int) -> List[str]:
        return list(self.user_permissions.get(user_id, []))

    async def insert_membership(
        self,
        user_id: int,
        group_id: int,
        args: Optional[Sequence[str]],
        time_from: int,
        time_to: Optional[int]
    ) -> None:
        self.add_membership(
            user_id,
            group_id,
            time_from,
            time_to,
            encode_args(list(args) if args else None, self.delimiter),
        )
        logger.info(f"Inserted membership of user {user_id} in group {group_id}")

    async def end_membership(self, user_id: int, group_id: int, end_time: int) -> None:
        rows = self.memberships.get(user_id, [])
        for index, row in enumerate(rows):
            if row.group_id != group_id:
                continue
            if row.time_to is None or row.time_to > end_time:
                rows[index] = DirectMembership(
                    group_id=row.group_id,
                    time_from=row.time_from,
                    time_to=end_time,
                    user_args=row.user_args,
                    group_args=row.group_args,
                )
        logger.info(f"Ended membership of user {user_id} in group {group_id}")

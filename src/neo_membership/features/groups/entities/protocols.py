"""Protocol interfaces for the groups feature.

Defines the storage contract the resolution engine consumes. Any backend
(PostgreSQL, in-memory, remote service) implementing this protocol can feed
the engine.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, Sequence, Set, runtime_checkable

from .group import Group
from .membership import DirectMembership


@runtime_checkable
class MembershipRepository(Protocol):
    """Protocol for membership and permission data access."""

    @abstractmethod
    async def get_direct_memberships(self, user_id: int) -> List[DirectMembership]:
        """Get every stored membership row of a user, ended rows included."""
        ...

    @abstractmethod
    async def get_groups_by_ids(self, ids: Set[int]) -> List[Group]:
        """Get groups by id in one batch. Unknown ids are omitted."""
        ...

    @abstractmethod
    async def get_permissions_for_groups(self, ids: Set[int]) -> List[str]:
        """Get raw permission strings granted to any of the groups."""
        ...

    @abstractmethod
    async def get_permissions_for_user(self, user_id: int) -> List[str]:
        """Get raw permission strings granted to the user individually."""
        ...

    @abstractmethod
    async def insert_membership(
        self,
        user_id: int,
        group_id: int,
        args: Optional[Sequence[str]],
        time_from: int,
        time_to: Optional[int]
    ) -> None:
        """Store a new membership row."""
        ...

    @abstractmethod
    async def end_membership(self, user_id: int, group_id: int, end_time: int) -> None:
        """End the user's open memberships in a group by setting ``time_to``."""
        ...

"""Per-user membership cache.

Holds each user's resolved group map and compiled permission tree. Entries
are populated lazily, written only once a load completes, and dropped as a
whole on invalidation. Cached structures are never patched in place.

An entry also goes stale on its own when the clock reaches the next start
or end of any membership it holds, since the ``active`` flags it carries
were computed against the time of the load.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional

from ...groups.entities.membership import ResolvedMembership
from ...groups.services.validity_merger import ValidityMerger, system_clock
from ...permissions.entities.permission_tree import PermissionTree

logger = logging.getLogger(__name__)

GroupMap = Dict[int, ResolvedMembership]
GroupsLoader = Callable[[int], Awaitable[GroupMap]]
PermissionsLoader = Callable[[GroupMap], Awaitable[PermissionTree]]


@dataclass
class CachedMembership:
    """Cache entry for one user."""

    groups: GroupMap
    permissions: Optional[PermissionTree] = None
    created_at: float = 0.0
    valid_until: Optional[int] = None  # epoch seconds of the next membership change


class _Flight:
    """Population state of one user, kept only while callers hold or await it."""

    __slots__ = ("lock", "holders", "token")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.holders = 0
        self.token: Optional[object] = None


class MembershipCache:
    """In-process cache keyed by user id.

    Population is single-flight per user: concurrent first callers wait on a
    per-user lock and reuse the value loaded by the first one. A load that is
    cancelled or fails leaves the cache untouched, and a load that races with
    ``invalidate`` is returned to its caller but not stored.
    """

    def __init__(
        self,
        max_age_seconds: int = 0,
        clock: Optional[Callable[[], int]] = None,
        timer: Callable[[], float] = time.monotonic,
        merger: Optional[ValidityMerger] = None
    ):
        """Initialize the cache.

        Args:
            max_age_seconds: Entry lifetime, 0 keeps entries until invalidated
            clock: Epoch-seconds clock that loads are resolved against
            timer: Monotonic clock used for entry ages
            merger: Computes when a loaded entry stops being accurate
        """
        self.max_age_seconds = max_age_seconds
        self.clock = clock if clock is not None else system_clock
        self._timer = timer
        self._merger = merger if merger is not None else ValidityMerger()
        self._entries: Dict[int, CachedMembership] = {}
        self._flights: Dict[int, _Flight] = {}

    @asynccontextmanager
    async def _single_flight(self, user_id: int) -> AsyncIterator[_Flight]:
        flight = self._flights.get(user_id)
        if flight is None:
            flight = self._flights[user_id] = _Flight()
        flight.holders += 1
        try:
            async with flight.lock:
                yield flight
        finally:
            flight.holders -= 1
            if flight.holders == 0 and self._flights.get(user_id) is flight:
                del self._flights[user_id]

    def _fresh(self, user_id: int) -> Optional[CachedMembership]:
        entry = self._entries.get(user_id)
        if entry is None:
            return None

        if self.max_age_seconds and self._timer() - entry.created_at > self.max_age_seconds:
            reason = "expired"
        elif entry.valid_until is not None and self.clock() >= entry.valid_until:
            reason = f"passed membership boundary {entry.valid_until}"
        else:
            return entry

        logger.debug(f"Membership cache entry for user {user_id} {reason}")
        del self._entries[user_id]
        return None

    def peek(self, user_id: int) -> Optional[CachedMembership]:
        """Return the cached entry without loading anything."""
        return self._fresh(user_id)

    async def get_groups(self, user_id: int, loader: GroupsLoader) -> GroupMap:
        """Get the user's resolved groups, loading them on a miss.

        ``loader`` receives the epoch time the groups must be resolved at.
        """
        entry = self._fresh(user_id)
        if entry is not None:
            logger.debug(f"Cache hit for user {user_id} groups")
            return entry.groups

        async with self._single_flight(user_id) as flight:
            entry = await self._ensure_entry(user_id, flight, loader)
            return entry.groups

    async def get_permissions(
        self,
        user_id: int,
        groups_loader: GroupsLoader,
        permissions_loader: PermissionsLoader
    ) -> PermissionTree:
        """Get the user's permission tree, loading groups and permissions as needed."""
        entry = self._fresh(user_id)
        if entry is not None and entry.permissions is not None:
            logger.debug(f"Cache hit for user {user_id} permissions")
            return entry.permissions

        async with self._single_flight(user_id) as flight:
            entry = await self._ensure_entry(user_id, flight, groups_loader)
            if entry.permissions is not None:
                return entry.permissions

            token = flight.token = object()
            tree = await permissions_loader(entry.groups)
            if flight.token is token and self._entries.get(user_id) is entry:
                entry.permissions = tree
            return tree

    async def _ensure_entry(
        self,
        user_id: int,
        flight: _Flight,
        loader: GroupsLoader
    ) -> CachedMembership:
        entry = self._fresh(user_id)
        if entry is not None:
            return entry

        token = flight.token = object()
        now = self.clock()
        groups = await loader(now)
        entry = CachedMembership(
            groups=groups,
            created_at=self._timer(),
            valid_until=self._merger.next_transition(
                (membership.window for membership in groups.values()), now
            ),
        )

        if flight.token is token:
            self._entries[user_id] = entry
            logger.debug(
                f"Cached {len(groups)} resolved groups for user {user_id} "
                f"(valid until {entry.valid_until})"
            )
        else:
            logger.debug(f"Discarding membership load for user {user_id}, invalidated while loading")
        return entry

    def invalidate(self, user_id: int) -> None:
        """Drop everything cached for a user, including a load in progress."""
        self._entries.pop(user_id, None)
        flight = self._flights.get(user_id)
        if flight is not None:
            flight.token = None
        logger.debug(f"Invalidated membership cache for user {user_id}")

    def clear(self) -> None:
        """Drop every entry and every load in progress."""
        for user_id in set(self._entries) | set(self._flights):
            self.invalidate(user_id)

    def __contains__(self, user_id: int) -> bool:
        return self._fresh(user_id) is not None

    def __len__(self) -> int:
        return len(self._entries)

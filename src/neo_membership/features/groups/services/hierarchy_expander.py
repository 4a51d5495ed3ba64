"""Group hierarchy expansion.

Turns a user's direct membership rows into one resolved membership per
reachable group. Parent pointers live in storage, so the hierarchy is walked
level by level with one batched group lookup per level.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..entities.group import Group
from ..entities.membership import DirectMembership, ResolvedMembership, ValidityWindow
from ..entities.protocols import MembershipRepository
from .display_name import DisplayNameRenderer
from .validity_merger import ValidityMerger

logger = logging.getLogger(__name__)


class GroupHierarchyExpander:
    """Expands direct memberships into the full ancestor closure.

    The walk keeps a visited set for the whole expansion, so every group is
    fetched at most once and parent cycles terminate. A group reached by
    several paths gets a single entry whose window merges all of them.
    """

    def __init__(
        self,
        repository: MembershipRepository,
        merger: Optional[ValidityMerger] = None,
        renderer: Optional[DisplayNameRenderer] = None
    ):
        self.repository = repository
        self.merger = merger or ValidityMerger()
        self.renderer = renderer or DisplayNameRenderer()

    async def expand(
        self,
        direct_memberships: Iterable[DirectMembership],
        now: int
    ) -> Dict[int, ResolvedMembership]:
        """Resolve every group reachable from the given memberships.

        Args:
            direct_memberships: Rows stored for the user
            now: Current time in epoch seconds, used for the active flag

        Returns:
            Mapping of group id to resolved membership
        """
        rows_by_group: Dict[int, List[DirectMembership]] = OrderedDict()
        for row in direct_memberships:
            rows_by_group.setdefault(row.group_id, []).append(row)

        if not rows_by_group:
            return {}

        groups = await self._discover(set(rows_by_group))

        windows: Dict[int, List[ValidityWindow]] = {}
        contributors: Dict[int, List[int]] = {}

        for group_id, rows in rows_by_group.items():
            if group_id not in groups:
                continue
            window = self.merger.merge(row.window for row in rows)
            for ancestor_id in self._chain(group_id, groups):
                windows.setdefault(ancestor_id, []).append(window)
                if ancestor_id != group_id:
                    contributors.setdefault(ancestor_id, []).append(group_id)

        resolved: Dict[int, ResolvedMembership] = {}
        for group_id, group in groups.items():
            if group_id not in windows:
                continue
            effective = self.merger.merge(windows[group_id])
            direct = group_id in rows_by_group

            display_row = self._display_row(rows_by_group[group_id], now) if direct else None
            name, args = self.renderer.render(group, display_row.user_args if display_row else None)

            resolved[group_id] = ResolvedMembership(
                group=group,
                time_from=effective.time_from,
                time_to=effective.time_to,
                active=self.merger.is_active(effective, now),
                direct=direct,
                name=name,
                args=args,
                labels=self._labels(display_row, group),
                children=None if direct else contributors.get(group_id, [])
            )

        logger.debug(
            f"Resolved {len(resolved)} groups "
            f"({len(rows_by_group)} direct) "
            f"from {len(groups)} fetched"
        )
        return resolved

    async def _discover(self, root_ids: Set[int]) -> Dict[int, Group]:
        """Fetch the given groups and all their ancestors, one batch per level."""
        groups: Dict[int, Group] = OrderedDict()
        visited: Set[int] = set()
        frontier = set(root_ids)
        level = 0

        while frontier:
            visited |= frontier
            fetched = await self.repository.get_groups_by_ids(frontier)

            found = {group.id: group for group in fetched}
            for missing_id in sorted(frontier - found.keys()):
                logger.warning(f"Group {missing_id} referenced at level {level} does not exist, skipping")

            next_frontier: Set[int] = set()
            for group in fetched:
                groups[group.id] = group
                if group.has_parent and group.parent not in visited:
                    next_frontier.add(group.parent)

            logger.debug(f"Hierarchy level {level}: fetched {len(found)} of {len(frontier)} groups")
            frontier = next_frontier
            level += 1

        return groups

    def _chain(self, group_id: int, groups: Dict[int, Group]) -> List[int]:
        """Walk parent pointers from a group, stopping at roots, missing groups and cycles."""
        chain: List[int] = []
        seen: Set[int] = set()
        current: Optional[int] = group_id

        while current is not None and current in groups:
            if current in seen:
                logger.warning(
                    f"Group hierarchy cycle detected: group {current} "
                    f"is its own ancestor (path {chain + [current]})"
                )
                break
            seen.add(current)
            chain.append(current)
            current = groups[current].parent

        return chain

    @staticmethod
    def _display_row(rows: List[DirectMembership], now: int) -> DirectMembership:
        """The row whose arguments name the group: the latest active one, else the latest."""
        active = [row for row in rows if row.window.is_active(now)]
        return max(active or rows, key=lambda row: row.time_from)

    def _labels(self, row: Optional[DirectMembership], group: Group) -> Tuple[str, ...]:
        """Argument labels stored with the membership row, falling back to the group's."""
        if row is not None and row.group_args:
            labels = self.renderer.parse_args(row.group_args)
            if labels:
                return tuple(labels)
        return group.args

"""Membership entities for neo-membership groups feature.

DirectMembership mirrors a stored user-group row. ResolvedMembership is the
derived, per-user view of a group reachable directly or through ancestors.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ....config.constants import RefusalReason
from .group import Group


@dataclass(frozen=True)
class DirectMembership:
    """A membership row stored for a user.

    ``time_to`` of ``None`` means the membership never expires. Ended
    memberships keep their row with ``time_to`` set to the end time.
    """

    group_id: int
    time_from: int
    time_to: Optional[int] = None
    user_args: Optional[str] = None
    group_args: Optional[str] = None

    @property
    def window(self) -> "ValidityWindow":
        return ValidityWindow(self.time_from, self.time_to)


@dataclass(frozen=True)
class ValidityWindow:
    """A ``[time_from, time_to]`` interval in epoch seconds, open-ended when ``time_to`` is None."""

    time_from: int
    time_to: Optional[int] = None

    def is_active(self, now: int) -> bool:
        if self.time_from > now:
            return False
        return self.time_to is None or self.time_to >= now


@dataclass
class ResolvedMembership:
    """Effective membership of a user in one reachable group."""

    group: Group
    time_from: int
    time_to: Optional[int]
    active: bool
    direct: bool
    name: str
    args: List[str] = field(default_factory=list)
    labels: Tuple[str, ...] = ()
    children: Optional[List[int]] = None

    @property
    def group_id(self) -> int:
        return self.group.id

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(self.time_from, self.time_to)

    @property
    def named_args(self) -> Dict[str, str]:
        """Pair the argument labels with this membership's values.

        Labels stored on the membership row take precedence over the group's.
        """
        return dict(zip(self.labels or self.group.args, self.args))

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        kind = "direct" if self.direct else f"inherited via {self.children}"
        return (
            f"ResolvedMembership({self.group.id}, {self.name!r}, "
            f"{self.time_from}-{self.time_to}, {state}, {kind})"
        )


@dataclass(frozen=True)
class MembershipRefusal:
    """Returned instead of a membership when a join request is refused."""

    group_id: int
    reason: RefusalReason

    def __str__(self) -> str:
        return f"Membership in group {self.group_id} refused: {self.reason.value}"

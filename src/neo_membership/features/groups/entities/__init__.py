"""Group entities package.

Domain entities and protocols for groups and memberships.
"""

from .group import Group
from .membership import (
    DirectMembership,
    ValidityWindow,
    ResolvedMembership,
    MembershipRefusal,
)
from .protocols import MembershipRepository

__all__ = [
    # Domain entities
    "Group",
    "DirectMembership",
    "ValidityWindow",
    "ResolvedMembership",
    "MembershipRefusal",

    # Protocols
    "MembershipRepository",
]

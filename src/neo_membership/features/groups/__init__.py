"""Groups feature for neo-membership.

Feature-First architecture for group hierarchy resolution:
- entities/: Group, membership rows, resolved memberships and the repository protocol
- services/: Hierarchy expansion, validity merging and display-name rendering
- repositories/: PostgreSQL and in-memory repository implementations
"""

from .entities import (
    Group,
    DirectMembership,
    ValidityWindow,
    ResolvedMembership,
    MembershipRefusal,
    MembershipRepository,
)

from .services import (
    ValidityMerger,
    DisplayNameRenderer,
    GroupHierarchyExpander,
    decode_args,
    encode_args,
)

from .repositories import AsyncPGMembershipRepository, InMemoryMembershipRepository

__all__ = [
    # Entities
    "Group",
    "DirectMembership",
    "ValidityWindow",
    "ResolvedMembership",
    "MembershipRefusal",

    # Protocols
    "MembershipRepository",

    # Services
    "ValidityMerger",
    "DisplayNameRenderer",
    "GroupHierarchyExpander",
    "decode_args",
    "encode_args",

    # Repository Implementations
    "AsyncPGMembershipRepository",
    "InMemoryMembershipRepository",
]

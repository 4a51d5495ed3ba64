"""Membership feature for neo-membership.

The consumer-facing service that ties the group, permission and cache
features together.
"""

from .services import MembershipService, system_clock

__all__ = [
    "MembershipService",
    "system_clock",
]

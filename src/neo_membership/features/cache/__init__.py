"""Cache feature for neo-membership.

Per-user in-process caching of resolved memberships and permission trees,
with optional cross-process invalidation over Redis.
"""

from .services import CachedMembership, MembershipCache, RedisInvalidationBus

__all__ = [
    "CachedMembership",
    "MembershipCache",
    "RedisInvalidationBus",
]

"""Cache services."""

from .membership_cache import CachedMembership, MembershipCache
from .redis_invalidation import RedisInvalidationBus

__all__ = [
    "CachedMembership",
    "MembershipCache",
    "RedisInvalidationBus",
]

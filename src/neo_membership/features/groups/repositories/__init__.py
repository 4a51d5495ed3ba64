"""Membership repository implementations."""

from .asyncpg_repository import AsyncPGMembershipRepository
from .memory_repository import InMemoryMembershipRepository

__all__ = [
    "AsyncPGMembershipRepository",
    "InMemoryMembershipRepository",
]

"""Membership services."""

from .membership_service import MembershipService, system_clock

__all__ = [
    "MembershipService",
    "system_clock",
]

"""Domain-specific exceptions for neo-membership.

Exceptions that relate to groups, memberships and permissions.
"""

from typing import Optional

from .base import NeoMembershipError


# Group Errors
class GroupError(NeoMembershipError):
    """Base class for group-related errors."""
    pass


class GroupNotFoundError(GroupError):
    """Raised when a referenced group does not exist."""

    def __init__(self, group_id: int, message: Optional[str] = None):
        super().__init__(
            message or f"Group {group_id} not found",
            details={"group_id": group_id}
        )
        self.group_id = group_id


class MalformedArgsError(GroupError):
    """Raised when stored membership arguments cannot be decoded."""

    def __init__(self, raw: str, reason: str):
        super().__init__(
            f"Malformed membership arguments: {reason}",
            details={"raw": raw, "reason": reason}
        )
        self.raw = raw


# Authorization Errors
class AuthorizationError(NeoMembershipError):
    """Base class for authorization errors."""
    pass


class PermissionDeniedError(AuthorizationError):
    """Raised when a user lacks a required permission."""

    def __init__(self, user_id: int, permission: str):
        super().__init__(
            f"User {user_id} denied permission: {permission}",
            details={"user_id": user_id, "permission": permission}
        )
        self.user_id = user_id
        self.permission = permission

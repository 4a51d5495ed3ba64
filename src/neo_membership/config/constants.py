"""Constants and enums for neo-membership.

Table names, cache key patterns and refusal reasons used throughout the
library. Table names correspond to the membership schema.
"""

from enum import Enum
from typing import Final


class TableNames:
    """Relational tables backing the membership repository."""

    GROUPS: Final[str] = "groups"
    USERS_GROUPS: Final[str] = "users_groups"
    GROUPS_PERMISSIONS: Final[str] = "groups_permissions"
    USERS_PERMISSIONS: Final[str] = "users_permissions"


class CacheKeys:
    """Redis channel names."""

    INVALIDATION_CHANNEL: Final[str] = "membership:invalidate"


class PermissionSyntax:
    """Separators and markers of dotted permission strings."""

    SEPARATOR: Final[str] = "."
    WILDCARD: Final[str] = "*"


class DisplayNameSyntax:
    """Placeholder syntax of group display-name templates."""

    PLACEHOLDER_PREFIX: Final[str] = "$"
    DEFAULT_ARGS_DELIMITER: Final[str] = ","


class RefusalReason(str, Enum):
    """Reasons a membership request is refused without raising."""

    MEMBERS_NOT_ALLOWED = "members_not_allowed"

"""Neo-Membership - Group membership and permission resolution.

Resolves a user's hierarchical, time-bounded group memberships into a flat
set of effective memberships and a wildcard-aware permission tree, cached
per user and invalidated on membership changes.
"""

from .__version__ import __version__

from .config import (
    MembershipSettings,
    get_settings,
    setup_logging,
    RefusalReason,
)

from .core.exceptions import (
    # Base Exception
    NeoMembershipError,

    # Domain Exceptions
    GroupNotFoundError,
    MalformedArgsError,
    PermissionDeniedError,

    # Infrastructure Exceptions
    RepositoryUnavailableError,
    InvalidationBusError,
    ConfigurationError,

    # Utility Functions
    create_error_response,
)

from .features.groups import (
    Group,
    DirectMembership,
    ValidityWindow,
    ResolvedMembership,
    MembershipRefusal,
    MembershipRepository,
    GroupHierarchyExpander,
    ValidityMerger,
    DisplayNameRenderer,
    AsyncPGMembershipRepository,
    InMemoryMembershipRepository,
)

from .features.permissions import PermissionTree, PermissionAggregator
from .features.cache import MembershipCache, RedisInvalidationBus
from .features.database import DatabaseManager
from .features.membership import MembershipService

__all__ = [
    # Configuration
    "MembershipSettings",
    "get_settings",
    "setup_logging",
    "RefusalReason",

    # Exceptions
    "NeoMembershipError",
    "GroupNotFoundError",
    "MalformedArgsError",
    "PermissionDeniedError",
    "RepositoryUnavailableError",
    "InvalidationBusError",
    "ConfigurationError",
    "create_error_response",

    # Groups
    "Group",
    "DirectMembership",
    "ValidityWindow",
    "ResolvedMembership",
    "MembershipRefusal",
    "MembershipRepository",
    "GroupHierarchyExpander",
    "ValidityMerger",
    "DisplayNameRenderer",
    "AsyncPGMembershipRepository",
    "InMemoryMembershipRepository",

    # Permissions
    "PermissionTree",
    "PermissionAggregator",

    # Cache
    "MembershipCache",
    "RedisInvalidationBus",

    # Database
    "DatabaseManager",

    # Service
    "MembershipService",

    # Version
    "__version__",
]

"""Exceptions module for neo-membership.

Complete exception hierarchy, organized by domain concerns and
infrastructure concerns.
"""

from .base import (
    NeoMembershipError,
    create_error_response,
)

from .domain import (
    # Group Errors
    GroupError,
    GroupNotFoundError,
    MalformedArgsError,

    # Authorization Errors
    AuthorizationError,
    PermissionDeniedError,
)

from .infrastructure import (
    # Repository Errors
    RepositoryError,
    RepositoryUnavailableError,

    # Cache Errors
    CacheError,
    InvalidationBusError,

    # Configuration Errors
    ConfigurationError,
)

__all__ = [
    # Base
    "NeoMembershipError",
    "create_error_response",

    # Domain
    "GroupError",
    "GroupNotFoundError",
    "MalformedArgsError",
    "AuthorizationError",
    "PermissionDeniedError",

    # Infrastructure
    "RepositoryError",
    "RepositoryUnavailableError",
    "CacheError",
    "InvalidationBusError",
    "ConfigurationError",
]

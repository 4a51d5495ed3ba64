"""Infrastructure-specific exceptions for neo-membership.

Exceptions related to storage backends and external systems.
"""

from .base import NeoMembershipError


# Repository Errors
class RepositoryError(NeoMembershipError):
    """Base class for repository-related errors."""
    pass


class RepositoryUnavailableError(RepositoryError):
    """Raised when the backing store cannot be reached or a query fails."""
    pass


# Cache Errors
class CacheError(NeoMembershipError):
    """Base class for cache-related errors."""
    pass


class InvalidationBusError(CacheError):
    """Raised when the invalidation channel cannot be subscribed to."""
    pass


# Configuration Errors
class ConfigurationError(NeoMembershipError):
    """Raised when there's a configuration issue."""
    pass

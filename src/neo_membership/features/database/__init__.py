"""Database feature for neo-membership.

Connection pool management for the PostgreSQL membership repository.
"""

from .services import DatabaseManager

__all__ = ["DatabaseManager"]

"""Database services."""

from .database_service import DatabaseManager

__all__ = ["DatabaseManager"]

"""Permission services."""

from .permission_aggregator import PermissionAggregator

__all__ = ["PermissionAggregator"]

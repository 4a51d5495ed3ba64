"""Permissions feature for neo-membership.

- entities/: The wildcard-aware permission tree
- services/: Aggregation of group and individual grants into a tree
"""

from .entities import Leaf, Branch, PermissionTree, split_permission
from .services import PermissionAggregator

__all__ = [
    "Leaf",
    "Branch",
    "PermissionTree",
    "split_permission",
    "PermissionAggregator",
]

"""Permission entities package."""

from .permission_tree import Leaf, Branch, Node, LEAF, PermissionTree, split_permission

__all__ = [
    "Leaf",
    "Branch",
    "Node",
    "LEAF",
    "PermissionTree",
    "split_permission",
]

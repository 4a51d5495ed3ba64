"""Hierarchical, wildcard-aware permission tree.

Dotted permission strings such as ``"reports.export.csv"`` are stored as a
tree of segments. A node is either a ``Leaf`` (the path is granted, and so is
everything below it) or a ``Branch`` of child segments. A ``*`` child grants
every path below its branch.

Lookup rules:
    - a ``*`` child of the current branch grants immediately
    - reaching a leaf grants, whether or not segments remain
    - a missing segment denies
    - running out of segments on a branch denies

So granting ``"reports.export"`` authorizes ``"reports.export"`` and
``"reports.export.csv"`` but not ``"reports"``, and granting ``"reports.*"``
authorizes ``"reports.export"`` but not the bare ``"reports"``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Union

from ....config.constants import PermissionSyntax


@dataclass(frozen=True)
class Leaf:
    """Terminal node: the path leading here is granted."""


@dataclass
class Branch:
    """Inner node mapping a segment to the next node."""

    children: Dict[str, "Node"] = field(default_factory=dict)


Node = Union[Leaf, Branch]

LEAF = Leaf()


def split_permission(permission: str) -> List[str]:
    """Split a dotted permission string into segments."""
    return permission.strip().split(PermissionSyntax.SEPARATOR)


class PermissionTree:
    """Compiled set of granted permissions for one user."""

    def __init__(self):
        self.root = Branch()

    @classmethod
    def from_permissions(cls, permissions: Iterable[str]) -> "PermissionTree":
        tree = cls()
        for permission in permissions:
            tree.grant(permission)
        return tree

    def grant(self, permission: str) -> None:
        """Insert a permission string into the tree.

        Granting below an existing leaf changes nothing. Granting a leaf where
        a branch exists replaces the branch, since the leaf covers it.
        """
        if not permission or not permission.strip():
            return

        segments = split_permission(permission)
        node = self.root
        for segment in segments[:-1]:
            child = node.children.get(segment)
            if isinstance(child, Leaf):
                return
            if child is None:
                child = Branch()
                node.children[segment] = child
            node = child

        node.children[segments[-1]] = LEAF

    def has(self, permission: str) -> bool:
        """Check whether a dotted permission is granted."""
        if not permission or not permission.strip():
            return False

        node: Node = self.root
        for segment in split_permission(permission):
            if PermissionSyntax.WILDCARD in node.children:
                return True
            child = node.children.get(segment)
            if child is None:
                return False
            if isinstance(child, Leaf):
                return True
            node = child

        return False

    def permissions(self) -> List[str]:
        """Flatten the tree back into sorted dotted permission strings."""
        return sorted(self._walk(self.root, []))

    def _walk(self, branch: Branch, prefix: List[str]) -> Iterator[str]:
        for segment, child in branch.children.items():
            path = prefix + [segment]
            if isinstance(child, Leaf):
                yield PermissionSyntax.SEPARATOR.join(path)
            else:
                yield from self._walk(child, path)

    def to_dict(self) -> Dict[str, Any]:
        """Nested ``{segment: True | {...}}`` mapping, suitable for JSON."""
        def convert(branch: Branch) -> Dict[str, Any]:
            return {
                segment: True if isinstance(child, Leaf) else convert(child)
                for segment, child in branch.children.items()
            }

        return convert(self.root)

    def is_empty(self) -> bool:
        return not self.root.children

    def __contains__(self, permission: str) -> bool:
        return self.has(permission)

    def __repr__(self) -> str:
        return f"PermissionTree({self.permissions()})"

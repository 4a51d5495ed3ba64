"""Group domain entity for neo-membership groups feature.

Represents a node of the group forest. Groups are created and edited by
administrative tooling outside the engine and are read-only here.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Group:
    """Domain entity representing a group in the membership hierarchy."""

    id: int
    name_base: str
    name_display: Optional[str] = None
    parent: Optional[int] = None
    members_allowed: bool = True
    is_public: bool = False
    searchable: bool = False
    args: Tuple[str, ...] = ()

    @property
    def has_parent(self) -> bool:
        """Check if the group hangs below another group."""
        return self.parent is not None

    @property
    def is_parameterized(self) -> bool:
        """Check if the group renders its name from a template."""
        return bool(self.name_display)

    def __str__(self) -> str:
        return f"Group({self.id}, {self.name_base!r})"

"""Group resolution services."""

from .validity_merger import ValidityMerger, system_clock
from .display_name import DisplayNameRenderer, decode_args, encode_args
from .hierarchy_expander import GroupHierarchyExpander

__all__ = [
    "ValidityMerger",
    "system_clock",
    "DisplayNameRenderer",
    "decode_args",
    "encode_args",
    "GroupHierarchyExpander",
]

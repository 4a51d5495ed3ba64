"""Display name rendering for parameterized groups.

Group display names are templates such as ``"Chair of $1 ($2)"``. The
values come from the membership row, stored as one CSV record.
"""

import csv
import io
import logging
import re
from typing import List, Optional, Tuple

from ....config.constants import DisplayNameSyntax
from ....core.exceptions import MalformedArgsError
from ..entities.group import Group

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(re.escape(DisplayNameSyntax.PLACEHOLDER_PREFIX) + r"(\d+)")


def decode_args(raw: Optional[str], delimiter: str = DisplayNameSyntax.DEFAULT_ARGS_DELIMITER) -> List[str]:
    """Decode stored argument text into an ordered list of values.

    Only the first record is meaningful; any further records are ignored.

    Raises:
        MalformedArgsError: If the text is not valid CSV
    """
    if not raw:
        return []

    try:
        reader = csv.reader(io.StringIO(raw, newline=""), delimiter=delimiter, strict=True)
        first = next(reader, None)
        # Exhaust the reader so malformed trailing records are still reported
        for _ in reader:
            pass
    except csv.Error as e:
        raise MalformedArgsError(raw, str(e)) from e

    return list(first) if first else []


def encode_args(args: Optional[List[str]], delimiter: str = DisplayNameSyntax.DEFAULT_ARGS_DELIMITER) -> Optional[str]:
    """Encode argument values as the single CSV record stored on a membership."""
    if not args:
        return None

    buffer = io.StringIO()
    csv.writer(buffer, delimiter=delimiter, lineterminator="").writerow(args)
    return buffer.getvalue()


class DisplayNameRenderer:
    """Renders a group's display name for one membership."""

    def __init__(self, delimiter: str = DisplayNameSyntax.DEFAULT_ARGS_DELIMITER):
        self.delimiter = delimiter

    def parse_args(self, raw: Optional[str]) -> List[str]:
        """Decode argument text, degrading to an empty list when malformed."""
        try:
            return decode_args(raw, self.delimiter)
        except MalformedArgsError as e:
            logger.debug(f"Ignoring membership arguments: {e.message}")
            return []

    def substitute(self, template: str, args: List[str]) -> str:
        """Replace ``$N`` with the Nth value (1-indexed); tokens beyond the values stay."""
        def replace(match: "re.Match[str]") -> str:
            index = int(match.group(1))
            if 1 <= index <= len(args):
                return args[index - 1]
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replace, template)

    def render(self, group: Group, raw_args: Optional[str]) -> Tuple[str, List[str]]:
        """Render the group name for a membership.

        Args:
            group: The group being rendered
            raw_args: Encoded argument text of the membership, if any

        Returns:
            Tuple of (rendered name, decoded argument values)
        """
        args = self.parse_args(raw_args)
        if not group.is_parameterized:
            return group.name_base, args
        return self.substitute(group.name_display, args), args

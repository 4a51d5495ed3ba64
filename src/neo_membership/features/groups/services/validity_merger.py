"""Validity window merging for memberships reached through several paths."""

import logging
import time
from typing import Iterable, Optional

from ..entities.membership import ValidityWindow

logger = logging.getLogger(__name__)


def system_clock() -> int:
    """Current time in whole epoch seconds."""
    return int(time.time())


class ValidityMerger:
    """Collapses the windows of every path into a group into one effective window.

    The earliest start wins. The latest end wins, and a single open-ended
    path keeps the group open-ended: access lasts as long as any path into
    the group remains valid.
    """

    def merge(self, windows: Iterable[ValidityWindow]) -> ValidityWindow:
        """Merge one or more windows.

        Args:
            windows: Windows of every contributing path

        Returns:
            The effective window

        Raises:
            ValueError: If no window is given
        """
        time_from = None
        time_to = None
        open_ended = False
        count = 0

        for window in windows:
            count += 1
            if time_from is None or window.time_from < time_from:
                time_from = window.time_from
            if window.time_to is None:
                open_ended = True
            elif time_to is None or window.time_to > time_to:
                time_to = window.time_to

        if count == 0:
            raise ValueError("Cannot merge an empty set of validity windows")

        return ValidityWindow(time_from, None if open_ended else time_to)

    def is_active(self, window: ValidityWindow, now: int) -> bool:
        """Check whether ``now`` falls inside the window."""
        return window.is_active(now)

    def next_transition(self, windows: Iterable[ValidityWindow], now: int) -> Optional[int]:
        """Earliest time after ``now`` at which any of the windows changes state.

        A window turns active at ``time_from`` and inactive one second after
        ``time_to``.

        Returns:
            Epoch seconds of the next change, or None if none is pending
        """
        upcoming = []
        for window in windows:
            if window.time_from > now:
                upcoming.append(window.time_from)
            if window.time_to is not None and window.time_to >= now:
                upcoming.append(window.time_to + 1)
        return min(upcoming, default=None)

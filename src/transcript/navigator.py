"""Cyclic cursor over a search result list."""

from __future__ import annotations

from collections.abc import Sequence

from src.transcript.models import Match


def segment_anchor(segment_index: int) -> str:
    """Stable DOM id for a segment in the filtered sequence (scroll target)."""
    return f"segment-{segment_index}"


class MatchNavigator:
    """Tracks the currently selected match and steps through matches cyclically.

    The cursor resets to 0 whenever :meth:`reset` installs a new match list.
    ``next``/``previous`` return the filtered-sequence index of the segment
    holding the newly selected match, or ``None`` when there are no matches.
    """

    def __init__(self, matches: Sequence[Match] = ()) -> None:
        self._matches: list[Match] = list(matches)
        self.current_index = 0

    def reset(self, matches: Sequence[Match]) -> None:
        self._matches = list(matches)
        self.current_index = 0

    @property
    def matches(self) -> list[Match]:
        return list(self._matches)

    @property
    def count(self) -> int:
        return len(self._matches)

    @property
    def current(self) -> Match | None:
        if not self._matches:
            return None
        return self._matches[self.current_index]

    @property
    def target_segment(self) -> int | None:
        """Segment index of the current match, for scroll-into-view."""
        match = self.current
        return match.segment_index if match is not None else None

    @property
    def position_label(self) -> str | None:
        """1-based ``"current/total"`` label, or None with no matches."""
        if not self._matches:
            return None
        return f"{self.current_index + 1}/{len(self._matches)}"

    def next(self) -> int | None:
        if not self._matches:
            return None
        self.current_index = (self.current_index + 1) % len(self._matches)
        return self.target_segment

    def previous(self) -> int | None:
        if not self._matches:
            return None
        if self.current_index == 0:
            self.current_index = len(self._matches) - 1
        else:
            self.current_index -= 1
        return self.target_segment

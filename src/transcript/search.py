"""Case-insensitive literal substring search across transcript segments."""

from __future__ import annotations

from collections.abc import Sequence

from src.transcript.models import Match, Segment

CONTEXT_CHARS = 50
ELLIPSIS = "..."


def _fold(text: str) -> str:
    """Lowercase *text* one character at a time, keeping its length.

    Characters whose lowercase form is longer (e.g. ``"İ"``) are kept as-is so
    offsets found in the folded text are valid in the original.
    """
    out = []
    for ch in text:
        lowered = ch.lower()
        out.append(lowered if len(lowered) == 1 else ch)
    return "".join(out)


def build_context(text: str, start: int, end: int, context_chars: int = CONTEXT_CHARS) -> str:
    """Return up to *context_chars* characters either side of ``text[start:end]``.

    A clipped left bound is marked with a leading ellipsis.
    """
    left = max(0, start - context_chars)
    right = min(len(text), end + context_chars)
    snippet = text[left:right]
    return ELLIPSIS + snippet if left > 0 else snippet


def find_in_text(text: str, query: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of every occurrence of *query* in *text*.

    Overlapping occurrences are included: the scan resumes one character after
    the previous match start.
    """
    if not query or not text:
        return []
    haystack = _fold(text)
    needle = _fold(query)
    spans: list[tuple[int, int]] = []
    pos = haystack.find(needle)
    while pos != -1:
        spans.append((pos, pos + len(needle)))
        pos = haystack.find(needle, pos + 1)
    return spans


def compute_matches(
    segments: Sequence[Segment],
    query: str,
    context_chars: int = CONTEXT_CHARS,
) -> list[Match]:
    """Find every occurrence of *query* in *segments*.

    Args:
        segments: The filtered segment sequence; ``Match.segment_index`` indexes it.
        query: Raw query string. It is trimmed; an empty query matches nothing.
        context_chars: Characters of context kept on each side of a match.

    Returns:
        Matches ordered by segment, then left to right within a segment.
    """
    needle = query.strip()
    if not needle:
        return []

    matches: list[Match] = []
    for index, segment in enumerate(segments):
        for start, end in find_in_text(segment.text, needle):
            matches.append(
                Match(
                    segment_index=index,
                    match_start=start,
                    match_end=end,
                    context=build_context(segment.text, start, end, context_chars),
                )
            )
    return matches


def matches_for_segment(matches: Sequence[Match], segment_index: int) -> list[Match]:
    """Return the matches that belong to one segment, in order."""
    return [m for m in matches if m.segment_index == segment_index]

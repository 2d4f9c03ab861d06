"""Search-highlight rendering for transcript segments.

Markup is built in a single left-to-right pass: unmatched spans and matched
spans are escaped and copied into an output buffer, so offsets are always read
from the untouched source text. Inserting ``<mark>`` tags into a growing string
while reusing the original offsets would shift every later match.
"""

from __future__ import annotations

import html
import re
from collections.abc import Sequence
from dataclasses import dataclass

from src.transcript.models import Match

TRUNCATE_CHARS = 300
TRUNCATION_SUFFIX = "..."

MATCH_CLASS = "transcript-match"
CURRENT_MATCH_CLASS = "transcript-match transcript-match-current"
MARK_CLOSE = "</mark>"

_MARK_TAG_RE = re.compile(r"</?mark\b[^>]*>")


@dataclass(frozen=True)
class Span:
    """A half-open character range to highlight."""

    start: int
    end: int
    current: bool = False


@dataclass(frozen=True)
class RenderedSegment:
    """Highlight output for one segment.

    Attributes:
        markup: Escaped text with ``<mark>`` tags around visible matches.
        truncated: Whether the text was cut to the collapsed length.
        hidden_matches: Matches beyond the cut that were not highlighted.
    """

    markup: str
    truncated: bool = False
    hidden_matches: int = 0


def mark_open(current: bool = False) -> str:
    cls = CURRENT_MATCH_CLASS if current else MATCH_CLASS
    return f'<mark class="{cls}">'


def is_truncated(text: str, expanded: bool, truncate_chars: int = TRUNCATE_CHARS) -> bool:
    return not expanded and len(text) > truncate_chars


def displayed_text(text: str, expanded: bool, truncate_chars: int = TRUNCATE_CHARS) -> str:
    """The text actually shown for a segment: full, or the collapsed prefix."""
    if is_truncated(text, expanded, truncate_chars):
        return text[:truncate_chars] + TRUNCATION_SUFFIX
    return text


def merge_spans(spans: Sequence[Span]) -> list[Span]:
    """Merge overlapping spans; adjacent spans stay separate."""
    merged: list[Span] = []
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if merged and span.start < merged[-1].end:
            last = merged[-1]
            merged[-1] = Span(last.start, max(last.end, span.end), last.current or span.current)
        else:
            merged.append(span)
    return merged


def clip_to_visible(
    matches: Sequence[Match],
    visible_chars: int,
    current: Match | None = None,
) -> tuple[list[Span], int]:
    """Clip match offsets to the first *visible_chars* characters.

    Returns the visible spans and the number of matches starting past the cut.
    """
    spans: list[Span] = []
    hidden = 0
    for m in matches:
        if m.match_start >= visible_chars:
            hidden += 1
            continue
        spans.append(Span(m.match_start, min(m.match_end, visible_chars), m == current))
    return spans, hidden


def highlight_text(text: str, spans: Sequence[Span]) -> str:
    """Escape *text* and wrap every span in a highlight marker."""
    out: list[str] = []
    pos = 0
    for span in merge_spans(spans):
        start = max(span.start, pos)
        end = min(span.end, len(text))
        if start >= end:
            continue
        out.append(html.escape(text[pos:start]))
        out.append(mark_open(span.current))
        out.append(html.escape(text[start:end]))
        out.append(MARK_CLOSE)
        pos = end
    out.append(html.escape(text[pos:]))
    return "".join(out)


def render_segment(
    text: str,
    matches: Sequence[Match],
    expanded: bool = False,
    truncate_chars: int = TRUNCATE_CHARS,
    current: Match | None = None,
) -> RenderedSegment:
    """Render one segment's displayed text with its matches highlighted.

    Match offsets refer to the full text. When the segment is collapsed only
    matches starting inside the visible prefix are highlighted (clipped at the
    cut); the rest are reported through ``hidden_matches``. The truncation
    ellipsis is never highlighted.

    Args:
        text: The segment's full text.
        matches: Matches belonging to this segment.
        expanded: Whether the user expanded the segment.
        truncate_chars: Collapsed display length.
        current: The navigator's current match, rendered with a distinct class.
    """
    if not is_truncated(text, expanded, truncate_chars):
        spans, hidden = clip_to_visible(matches, len(text), current)
        return RenderedSegment(markup=highlight_text(text, spans), hidden_matches=hidden)

    visible = text[:truncate_chars]
    spans, hidden = clip_to_visible(matches, truncate_chars, current)
    markup = highlight_text(visible, spans) + html.escape(TRUNCATION_SUFFIX)
    return RenderedSegment(markup=markup, truncated=True, hidden_matches=hidden)


def strip_markup(markup: str) -> str:
    """Remove highlight markers and undo escaping; inverse of :func:`highlight_text`."""
    return html.unescape(_MARK_TAG_RE.sub("", markup))

"""Data models for the transcript viewer core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Segment:
    """Canonical representation of one speaker utterance.

    ``timestamp_seconds`` is always in seconds; ``None`` means the source
    timestamp was missing or implausible.
    """

    speaker: str
    text: str
    timestamp_seconds: int | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class Transcript:
    """A normalized call transcript. Segment order is utterance order."""

    id: str | None
    call_id: str | None
    segments: tuple[Segment, ...] = field(default_factory=tuple)
    content: str = ""
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.segments


@dataclass(frozen=True)
class Match:
    """One occurrence of a search query inside a segment's full text.

    ``segment_index`` points into the filtered segment sequence the search
    ran over; offsets are half-open and refer to the original-case text.
    """

    segment_index: int
    match_start: int
    match_end: int
    context: str


@dataclass(frozen=True)
class FetchResult:
    """Envelope returned by a transcript fetch.

    Exactly one of ``data`` (the raw payload) or ``error`` (a human-readable
    message) is meaningful, selected by ``ok``.
    """

    ok: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, data: Any, status_code: int | None = 200) -> FetchResult:
        return cls(ok=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: int | None = None) -> FetchResult:
        return cls(ok=False, error=error, status_code=status_code)

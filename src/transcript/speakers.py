"""Speaker-level helpers: distinct speakers, speaker filtering, agent detection."""

from __future__ import annotations

from collections.abc import Sequence

from src.transcript.models import Segment

ALL_SPEAKERS = "all"

DEFAULT_AGENT_MARKERS: tuple[str, ...] = ("agent", "assistant")


def distinct_speakers(segments: Sequence[Segment]) -> list[str]:
    """Return the sorted set of speaker identifiers across *segments*."""
    return sorted({s.speaker for s in segments})


def filter_segments(segments: Sequence[Segment], speaker: str = ALL_SPEAKERS) -> list[Segment]:
    """Return the segments spoken by *speaker*, or all of them for ``"all"``.

    Original order is preserved.
    """
    if speaker == ALL_SPEAKERS:
        return list(segments)
    return [s for s in segments if s.speaker == speaker]


def is_agent_speaker(
    speaker: str | None,
    markers: Sequence[str] = DEFAULT_AGENT_MARKERS,
) -> bool:
    """Return True if *speaker* looks like the AI agent rather than the caller."""
    if not speaker:
        return False
    lowered = speaker.lower()
    return any(marker in lowered for marker in markers)


def empty_state_message(speaker: str = ALL_SPEAKERS) -> str:
    """Message shown when the filtered segment list is empty."""
    if speaker == ALL_SPEAKERS:
        return "No transcript content available"
    return f"No content for {speaker}"

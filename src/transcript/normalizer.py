"""Normalize raw transcript payloads into the canonical Transcript model.

The platform backend has shipped several payload shapes over time:

Call transcripts (camelCase, seconds)::

    {"id": "...", "callId": "...", "speakers": [
        {"speaker": "agent", "text": "...", "timestamp": 12, "confidence": 0.9}
    ], "createdAt": "..."}

Stored transcripts (snake_case, milliseconds)::

    {"id": "...", "call_id": "...", "speaker_segments": [
        {"speaker": "user", "text": "...", "timestamp": 125000}
    ], "created_at": "..."}

Field names are resolved through the candidate tables below, evaluated in
priority order. Normalization never raises: malformed segments are defaulted
in place and an unusable payload yields an empty transcript.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from src.transcript.models import Segment, Transcript

logger = logging.getLogger(__name__)

# Values above this are milliseconds. A converted value still above it is
# implausible for a call and is dropped, so canonical values never exceed it.
MS_THRESHOLD = 10_000

DEFAULT_SPEAKER = "Unknown"

SEGMENT_LIST_FIELDS: tuple[str, ...] = ("speakers", "speaker_segments")

SEGMENT_FIELDS: dict[str, tuple[str, ...]] = {
    "speaker": ("speaker", "speaker_id", "speakerId", "role"),
    "text": ("text", "message", "content"),
    "timestamp": ("timestamp", "timestamp_ms", "timestampMs", "start_time", "startTime"),
    "confidence": ("confidence", "confidence_score", "confidenceScore"),
}

TRANSCRIPT_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "transcript_id", "transcriptId"),
    "call_id": ("callId", "call_id"),
    "content": ("content", "full_text", "fullText"),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
}


def pick_field(record: Mapping[str, Any], candidates: tuple[str, ...]) -> Any:
    """Return the value of the first candidate key present with a non-null value."""
    for name in candidates:
        value = record.get(name)
        if value is not None:
            return value
    return None


def normalize_timestamp(value: Any) -> int | None:
    """Convert a raw timestamp to whole seconds.

    Returns ``None`` for missing, non-numeric, negative or implausibly large
    values. Already-normalized values pass through unchanged.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None

    try:
        seconds = float(value)
    except (ValueError, OverflowError):
        return None

    if not math.isfinite(seconds) or seconds < 0:
        return None

    if seconds > MS_THRESHOLD:
        seconds = seconds / 1000
    if seconds > MS_THRESHOLD:
        logger.debug("Discarding implausible timestamp %r", value)
        return None
    return math.floor(seconds)


def _normalize_confidence(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not 0.0 <= value <= 1.0:
        return None
    return float(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_segment(raw: Any, index: int = 0) -> Segment:
    """Convert one raw segment into a :class:`Segment`, defaulting bad fields."""
    if not isinstance(raw, Mapping):
        logger.warning("Segment %d is not an object (%s); defaulting", index, type(raw).__name__)
        text = raw if isinstance(raw, str) else ""
        return Segment(speaker=DEFAULT_SPEAKER, text=text)

    speaker = pick_field(raw, SEGMENT_FIELDS["speaker"])
    text = pick_field(raw, SEGMENT_FIELDS["text"])
    if speaker is None or text is None:
        logger.warning("Segment %d is missing speaker or text; defaulting", index)

    return Segment(
        speaker=_as_text(speaker) or DEFAULT_SPEAKER,
        text=_as_text(text),
        timestamp_seconds=normalize_timestamp(pick_field(raw, SEGMENT_FIELDS["timestamp"])),
        confidence=_normalize_confidence(pick_field(raw, SEGMENT_FIELDS["confidence"])),
    )


def select_segment_list(raw: Mapping[str, Any]) -> list[Any]:
    """Return the raw segment list from whichever known field holds one.

    A non-empty list wins over an empty one; an absent or non-list field is
    ignored.
    """
    lists = [raw[name] for name in SEGMENT_LIST_FIELDS if isinstance(raw.get(name), list)]
    for candidate in lists:
        if candidate:
            return candidate
    return lists[0] if lists else []


def normalize_transcript(raw: Any) -> Transcript:
    """Normalize a raw transcript payload.

    Args:
        raw: The ``data`` member of a transcript-fetch success envelope.

    Returns:
        A :class:`Transcript`; empty (no segments) when the payload is unusable.
    """
    if not isinstance(raw, Mapping):
        logger.warning("Transcript payload is not an object (%s)", type(raw).__name__)
        return Transcript(id=None, call_id=None)

    segments = tuple(
        normalize_segment(item, index) for index, item in enumerate(select_segment_list(raw))
    )

    def _field(name: str) -> str | None:
        value = pick_field(raw, TRANSCRIPT_FIELDS[name])
        return None if value is None else str(value)

    created_at = _field("created_at")
    return Transcript(
        id=_field("id"),
        call_id=_field("call_id"),
        segments=segments,
        content=_field("content") or "",
        created_at=created_at,
        updated_at=_field("updated_at") or created_at,
    )

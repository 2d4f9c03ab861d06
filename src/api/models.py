"""Pydantic response schemas for the transcript API."""

from __future__ import annotations

from pydantic import BaseModel


class SegmentModel(BaseModel):
    """A canonical transcript segment."""

    speaker: str
    text: str
    timestamp_seconds: int | None = None
    confidence: float | None = None


class TranscriptResponse(BaseModel):
    """Response body for GET /api/transcripts/{call_id}."""

    id: str | None = None
    call_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    segments: list[SegmentModel] = []
    speakers: list[str] = []


class MatchModel(BaseModel):
    """One query occurrence within a segment."""

    segment_index: int
    match_start: int
    match_end: int
    context: str
    speaker: str
    timestamp: str


class SearchResponse(BaseModel):
    """Response body for GET /api/transcripts/{call_id}/search."""

    call_id: str
    query: str
    speaker: str
    total: int
    matches: list[MatchModel] = []


class FormattedSegment(BaseModel):
    """A segment rendered with search highlighting."""

    index: int
    anchor: str
    speaker: str
    timestamp: str
    markup: str
    is_agent: bool
    match_count: int = 0


class FormattedResponse(BaseModel):
    """Response body for GET /api/transcripts/{call_id}/formatted."""

    call_id: str
    transcript_id: str | None = None
    created_at: str | None = None
    search_term: str | None = None
    segments: list[FormattedSegment] = []

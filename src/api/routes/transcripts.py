"""Transcript endpoints: canonical view, in-call search, highlighted view, export."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from src.api.models import (
    FormattedResponse,
    FormattedSegment,
    MatchModel,
    SearchResponse,
    SegmentModel,
    TranscriptResponse,
)
from src.transcript.export import export_filename, export_transcript, format_timestamp
from src.transcript.highlight import render_segment
from src.transcript.models import Transcript
from src.transcript.navigator import segment_anchor
from src.transcript.normalizer import normalize_transcript
from src.transcript.search import compute_matches, matches_for_segment
from src.transcript.speakers import (
    ALL_SPEAKERS,
    distinct_speakers,
    filter_segments,
    is_agent_speaker,
)
from src.ui.api_client import fetch_transcript
from src.viewer_config import ExportFormat, TranscriptSource, ViewerConfig

router = APIRouter()

CONTENT_TYPES: dict[ExportFormat, str] = {
    ExportFormat.TXT: "text/plain; charset=utf-8",
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv; charset=utf-8",
}


def _load_transcript(call_id: str, source: TranscriptSource) -> Transcript:
    """Fetch and normalize a transcript, mapping fetch failures to HTTP errors.

    Raises:
        HTTPException(404): The backend has no transcript for this call.
        HTTPException(502): The backend could not be reached or returned an error.
    """
    result = fetch_transcript(call_id, source)
    if not result.ok:
        status = 404 if result.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=result.error)
    return normalize_transcript(result.data)


@router.get("/api/transcripts/{call_id}", response_model=TranscriptResponse)
def get_transcript(
    call_id: str,
    source: TranscriptSource = TranscriptSource.CALLS,
) -> TranscriptResponse:
    """Return the normalized transcript and its distinct speakers."""
    transcript = _load_transcript(call_id, source)
    return TranscriptResponse(
        id=transcript.id,
        call_id=transcript.call_id or call_id,
        created_at=transcript.created_at,
        updated_at=transcript.updated_at,
        segments=[
            SegmentModel(
                speaker=s.speaker,
                text=s.text,
                timestamp_seconds=s.timestamp_seconds,
                confidence=s.confidence,
            )
            for s in transcript.segments
        ],
        speakers=distinct_speakers(transcript.segments),
    )


@router.get("/api/transcripts/{call_id}/search", response_model=SearchResponse)
def search_transcript(
    call_id: str,
    q: str,
    speaker: str = ALL_SPEAKERS,
    source: TranscriptSource = TranscriptSource.CALLS,
) -> SearchResponse:
    """Find every occurrence of *q* in the (optionally speaker-filtered) transcript."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Search term (q) is required")

    transcript = _load_transcript(call_id, source)
    segments = filter_segments(transcript.segments, speaker)
    config = ViewerConfig.from_settings()
    matches = compute_matches(segments, q, config.context_chars)

    return SearchResponse(
        call_id=call_id,
        query=q.strip(),
        speaker=speaker,
        total=len(matches),
        matches=[
            MatchModel(
                segment_index=m.segment_index,
                match_start=m.match_start,
                match_end=m.match_end,
                context=m.context,
                speaker=segments[m.segment_index].speaker,
                timestamp=format_timestamp(segments[m.segment_index].timestamp_seconds),
            )
            for m in matches
        ],
    )


@router.get("/api/transcripts/{call_id}/formatted", response_model=FormattedResponse)
def get_formatted_transcript(
    call_id: str,
    highlight: str | None = None,
    speaker: str = ALL_SPEAKERS,
    source: TranscriptSource = TranscriptSource.CALLS,
) -> FormattedResponse:
    """Return each segment as escaped markup with *highlight* occurrences marked.

    Segments are rendered in full (never truncated).
    """
    transcript = _load_transcript(call_id, source)
    segments = filter_segments(transcript.segments, speaker)
    config = ViewerConfig.from_settings()
    matches = compute_matches(segments, highlight or "", config.context_chars)

    formatted: list[FormattedSegment] = []
    for index, segment in enumerate(segments):
        own = matches_for_segment(matches, index)
        rendered = render_segment(segment.text, own, expanded=True)
        formatted.append(
            FormattedSegment(
                index=index,
                anchor=segment_anchor(index),
                speaker=segment.speaker,
                timestamp=format_timestamp(segment.timestamp_seconds),
                markup=rendered.markup,
                is_agent=is_agent_speaker(segment.speaker, config.agent_markers),
                match_count=len(own),
            )
        )

    return FormattedResponse(
        call_id=call_id,
        transcript_id=transcript.id,
        created_at=transcript.created_at,
        search_term=highlight.strip() if highlight else None,
        segments=formatted,
    )


@router.get("/api/transcripts/{call_id}/export")
def export_call_transcript(
    call_id: str,
    format: ExportFormat = ExportFormat.TXT,
    speaker: str = ALL_SPEAKERS,
    timestamps: Annotated[bool, Query()] = True,
    source: TranscriptSource = TranscriptSource.CALLS,
) -> Response:
    """Download the transcript as txt, json or csv."""
    transcript = _load_transcript(call_id, source)
    segments = filter_segments(transcript.segments, speaker)
    body = export_transcript(transcript, segments, format, timestamps)
    filename = export_filename(transcript.call_id or call_id, format)
    return Response(
        content=body,
        media_type=CONTENT_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

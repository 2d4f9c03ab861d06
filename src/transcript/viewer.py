"""Transcript viewer state: load lifecycle, filtering, search and navigation.

All derived state (filtered segments, matches) is recomputed from
``(transcript, speaker, query)`` whenever one of them changes; nothing is
updated incrementally. Fetches are identified by call id so a response for a
call the viewer is no longer showing is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from src.transcript.export import (
    DeliveryResult,
    copy_to_clipboard,
    export_filename,
    export_transcript,
    format_timestamp,
    save_to_file,
)
from src.transcript.highlight import RenderedSegment, is_truncated, render_segment
from src.transcript.models import FetchResult, Match, Segment, Transcript
from src.transcript.navigator import MatchNavigator, segment_anchor
from src.transcript.normalizer import normalize_transcript
from src.transcript.search import compute_matches, matches_for_segment
from src.transcript.speakers import (
    ALL_SPEAKERS,
    distinct_speakers,
    empty_state_message,
    filter_segments,
    is_agent_speaker,
)
from src.viewer_config import ExportFormat, ViewerConfig

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], FetchResult]


@dataclass(frozen=True)
class SegmentView:
    """Everything the presentation layer needs to draw one segment."""

    index: int
    anchor: str
    segment: Segment
    is_agent: bool
    timestamp_label: str
    rendered: RenderedSegment
    expandable: bool
    expanded: bool
    is_target: bool


class TranscriptViewer:
    """State holder for one transcript viewer instance."""

    def __init__(self, config: ViewerConfig | None = None) -> None:
        self.config = config or ViewerConfig()
        self.call_id: str | None = None
        self.transcript: Transcript | None = None
        self.loaded_call_id: str | None = None
        self.loading = False
        self.error: str | None = None
        self.query = ""
        self.speaker = ALL_SPEAKERS
        self.show_timestamps = self.config.show_timestamps
        self.expanded: set[int] = set()
        self.navigator = MatchNavigator()
        self._filtered: list[Segment] = []

    # ── load lifecycle ──

    def begin_load(self, call_id: str) -> None:
        """Record *call_id* as the only fetch whose result will be accepted."""
        if call_id != self.loaded_call_id:
            self.transcript = None
            self.loaded_call_id = None
            self.speaker = ALL_SPEAKERS
            self.expanded.clear()
            self._recompute()
        self.call_id = call_id
        self.loading = True
        self.error = None

    def finish_load(self, call_id: str, result: FetchResult) -> bool:
        """Commit a fetch result. Returns False if the result was stale."""
        if call_id != self.call_id:
            logger.info("Ignoring stale transcript response for call %s", call_id)
            return False

        self.loading = False
        if not result.ok:
            self.error = result.error or "Failed to load transcript"
            logger.warning("Transcript load for call %s failed: %s", call_id, self.error)
            self._recompute()
            return True

        self.transcript = normalize_transcript(result.data)
        self.loaded_call_id = call_id
        self.error = None
        if self.speaker not in self.speakers and self.speaker != ALL_SPEAKERS:
            self.speaker = ALL_SPEAKERS
        self.expanded.clear()
        self._recompute()
        return True

    def load(self, call_id: str, fetch: Fetcher) -> bool:
        """Fetch and commit the transcript for *call_id*."""
        self.begin_load(call_id)
        try:
            result = fetch(call_id)
        except Exception as e:
            logger.exception("Transcript fetch for call %s raised", call_id)
            result = FetchResult.failure(str(e) or "Failed to load transcript")
        return self.finish_load(call_id, result)

    def retry(self, fetch: Fetcher) -> bool:
        if self.call_id is None:
            return False
        return self.load(self.call_id, fetch)

    def close(self) -> None:
        """Discard the transcript and stop accepting in-flight results."""
        self.call_id = None
        self.transcript = None
        self.loaded_call_id = None
        self.loading = False
        self.error = None
        self.query = ""
        self.speaker = ALL_SPEAKERS
        self.expanded.clear()
        self._recompute()

    # ── derived state ──

    def _recompute(self) -> None:
        segments = self.transcript.segments if self.transcript else ()
        self._filtered = filter_segments(segments, self.speaker)
        self.navigator.reset(compute_matches(self._filtered, self.query, self.config.context_chars))

    @property
    def speakers(self) -> list[str]:
        return distinct_speakers(self.transcript.segments) if self.transcript else []

    @property
    def filtered_segments(self) -> list[Segment]:
        return list(self._filtered)

    @property
    def matches(self) -> list[Match]:
        return self.navigator.matches

    @property
    def match_position(self) -> str | None:
        return self.navigator.position_label

    @property
    def is_empty(self) -> bool:
        """True when a transcript is loaded but the filtered view has no segments."""
        return self.transcript is not None and not self._filtered

    @property
    def empty_message(self) -> str:
        return empty_state_message(self.speaker)

    @property
    def duration_label(self) -> str:
        """Call length as ``mm:ss``, taken from the latest known segment timestamp."""
        if self.transcript is None:
            return ""
        known = [
            s.timestamp_seconds
            for s in self.transcript.segments
            if s.timestamp_seconds is not None
        ]
        return format_timestamp(max(known)) if known else ""

    # ── user actions ──

    def set_query(self, query: str) -> None:
        self.query = query
        self._recompute()

    def set_speaker(self, speaker: str) -> None:
        self.speaker = speaker
        self.expanded.clear()
        self._recompute()

    def toggle_expanded(self, index: int) -> None:
        if index in self.expanded:
            self.expanded.discard(index)
        else:
            self.expanded.add(index)

    def _reveal_current(self) -> int | None:
        match = self.navigator.current
        if match is None:
            return None
        text = self._filtered[match.segment_index].text
        hidden = match.match_start >= self.config.truncate_chars
        if hidden and is_truncated(text, False, self.config.truncate_chars):
            self.expanded.add(match.segment_index)
        return match.segment_index

    def next_match(self) -> int | None:
        """Advance the cursor; returns the segment index to scroll to."""
        if self.navigator.next() is None:
            return None
        return self._reveal_current()

    def previous_match(self) -> int | None:
        if self.navigator.previous() is None:
            return None
        return self._reveal_current()

    # ── presentation ──

    def segment_views(self) -> list[SegmentView]:
        current = self.navigator.current
        matches = self.navigator.matches
        views: list[SegmentView] = []
        for index, segment in enumerate(self._filtered):
            expanded = index in self.expanded
            label = format_timestamp(segment.timestamp_seconds) if self.show_timestamps else ""
            views.append(
                SegmentView(
                    index=index,
                    anchor=segment_anchor(index),
                    segment=segment,
                    is_agent=is_agent_speaker(segment.speaker, self.config.agent_markers),
                    timestamp_label=label,
                    rendered=render_segment(
                        segment.text,
                        matches_for_segment(matches, index),
                        expanded=expanded,
                        truncate_chars=self.config.truncate_chars,
                        current=current,
                    ),
                    expandable=len(segment.text) > self.config.truncate_chars,
                    expanded=expanded,
                    is_target=current is not None and current.segment_index == index,
                )
            )
        return views

    # ── export ──

    def export_body(self, format: str | ExportFormat = ExportFormat.TXT) -> str:
        """Serialized filtered segments; identical for every sink."""
        transcript = self.transcript or Transcript(id=None, call_id=self.call_id)
        return export_transcript(transcript, self._filtered, format, self.show_timestamps)

    def export_filename(self, format: str | ExportFormat = ExportFormat.TXT) -> str:
        call_id = self.transcript.call_id if self.transcript and self.transcript.call_id else None
        return export_filename(call_id or self.call_id, format)

    def copy(self, sink: Callable[[str], object]) -> DeliveryResult:
        if self.transcript is None:
            return DeliveryResult(ok=False, message="No transcript loaded")
        return copy_to_clipboard(self.export_body(), sink)

    def download(
        self,
        directory: str | Path,
        format: str | ExportFormat = ExportFormat.TXT,
    ) -> DeliveryResult:
        if self.transcript is None:
            return DeliveryResult(ok=False, message="No transcript loaded")
        return save_to_file(self.export_body(format), self.export_filename(format), directory)

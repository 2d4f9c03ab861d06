"""Call Transcript Viewer -- Streamlit UI.

Admin dashboard page for opening a call transcript, searching it, stepping
through matches, filtering by speaker, and copying or downloading it.
"""

from __future__ import annotations

import html
import json
import logging

import streamlit as st
import streamlit.components.v1 as components

from src.config import settings
from src.transcript.export import DeliveryResult
from src.transcript.navigator import segment_anchor
from src.transcript.speakers import ALL_SPEAKERS
from src.transcript.viewer import SegmentView, TranscriptViewer
from src.ui.api_client import check_health, fetch_transcript
from src.viewer_config import ExportFormat, TranscriptSource, ViewerConfig

logging.basicConfig(level=settings.log_level)

MIME_TYPES = {
    ExportFormat.TXT: "text/plain",
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv",
}

COPY_REQUESTED = "Copy requested. If nothing was copied, use the copy icon on the text below."

HIGHLIGHT_CSS = """
<style>
mark.transcript-match { background: #fde68a; color: #92400e; padding: 0 2px; border-radius: 3px; }
mark.transcript-match-current { background: #f59e0b; color: #1f2937; }
.segment { padding: 0.4rem 0.8rem; border-radius: 1rem; margin-bottom: 0.3rem; max-width: 75%; }
.segment-agent { background: #d1fae5; margin-left: auto; }
.segment-user { background: #f3f4f6; margin-right: auto; }
.segment-meta { font-size: 0.7rem; color: #6b7280; }
</style>
"""


def _clipboard_sink(text: str) -> None:
    """Write *text* to the browser clipboard via an injected script."""
    components.html(
        f"<script>navigator.clipboard.writeText({json.dumps(text)});</script>",
        height=0,
    )


def _scroll_to(anchor: str) -> None:
    components.html(
        "<script>"
        f"const el = window.parent.document.getElementById({json.dumps(anchor)});"
        "if (el) { el.scrollIntoView({behavior: 'smooth', block: 'center'}); }"
        "</script>",
        height=0,
    )


def _notify_failure(result: DeliveryResult) -> None:
    st.toast(result.message, icon="⚠️")


def _navigate(viewer: TranscriptViewer, step: int) -> None:
    """Button callback: move the match cursor and remember where to scroll."""
    target = viewer.next_match() if step > 0 else viewer.previous_match()
    st.session_state.scroll_target = target


def _render_segment(view: SegmentView, viewer: TranscriptViewer) -> None:
    side = "segment-agent" if view.is_agent else "segment-user"
    meta = html.escape(view.segment.speaker)
    if view.timestamp_label:
        meta += f" &middot; {view.timestamp_label}"
    st.markdown(
        f'<div id="{view.anchor}" class="segment {side}">'
        f'<div class="segment-meta">{meta}</div>'
        f"<div>{view.rendered.markup}</div></div>",
        unsafe_allow_html=True,
    )
    if view.rendered.hidden_matches:
        n = view.rendered.hidden_matches
        st.caption(f"{n} match{'es' if n != 1 else ''} hidden, expand to view")
    if view.expandable:
        st.button(
            "Show less" if view.expanded else "Show more",
            key=f"expand-{view.index}",
            on_click=viewer.toggle_expanded,
            args=(view.index,),
        )


# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Call Transcript Viewer", layout="wide")
st.markdown(HIGHLIGHT_CSS, unsafe_allow_html=True)

if "viewer" not in st.session_state:
    st.session_state.viewer = TranscriptViewer(ViewerConfig.from_settings())
viewer: TranscriptViewer = st.session_state.viewer

# ---------------------------------------------------------------------------
# Sidebar -- call selection + API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("Call Transcripts")
    st.markdown("---")

    call_id_input = st.text_input("Call ID", placeholder="e.g. 4f1c9a2e-...", key="call_id")
    source: str = st.selectbox(
        "Transcript source",
        options=[s.value for s in TranscriptSource],
        format_func=lambda x: "Dialer" if x == "dialer" else "Calls",
    )

    def _fetch(call_id: str):  # type: ignore[no-untyped-def]
        return fetch_transcript(call_id, source)

    col_open, col_close = st.columns(2)
    if col_open.button("Open", key="open", disabled=not call_id_input.strip()):
        with st.spinner("Loading transcript..."):
            viewer.load(call_id_input.strip(), _fetch)
    if col_close.button("Close", disabled=viewer.call_id is None):
        viewer.close()

    st.markdown("---")

    if check_health():
        st.markdown(":green_circle: Backend connected")
    else:
        st.markdown(":red_circle: Backend unreachable")

# ---------------------------------------------------------------------------
# Main -- transcript
# ---------------------------------------------------------------------------
st.header("Call Transcript")

if viewer.call_id is None:
    st.info("Enter a call ID in the sidebar to open its transcript.")
    st.stop()

if viewer.error:
    st.error(f"Failed to load transcript: {viewer.error}")
    if st.button("Try Again"):
        with st.spinner("Loading transcript..."):
            viewer.retry(_fetch)
        st.rerun()

if viewer.transcript is None:
    st.stop()

badge = f"{len(viewer.transcript.segments)} segments"
if viewer.duration_label:
    badge += f" · {viewer.duration_label}"
st.caption(badge)

# Search & controls. The search and speaker inputs are drawn before the match
# counter so the counter reflects this run's query and filter.
col_search, col_nav, col_speaker = st.columns([3, 2, 2])
with col_search:
    query = st.text_input(
        "Search transcript",
        value=viewer.query,
        placeholder="Search transcript...",
        key="query",
    )
    if query != viewer.query:
        viewer.set_query(query)
with col_speaker:
    speaker_options = [ALL_SPEAKERS, *viewer.speakers]
    chosen = st.selectbox(
        "Speaker",
        options=speaker_options,
        index=speaker_options.index(viewer.speaker) if viewer.speaker in speaker_options else 0,
        format_func=lambda x: "All speakers" if x == ALL_SPEAKERS else x,
    )
    if chosen != viewer.speaker:
        viewer.set_speaker(chosen)
with col_nav:
    if viewer.match_position:
        # Navigation runs in on_click callbacks, before the rerun draws the counter.
        prev_col, next_col = st.columns(2)
        prev_col.button("▲ Prev", key="prev_match", on_click=_navigate, args=(viewer, -1))
        next_col.button("▼ Next", key="next_match", on_click=_navigate, args=(viewer, 1))
        st.caption(f"Match {viewer.match_position}")
    elif viewer.query.strip():
        st.caption("No matches")

viewer.show_timestamps = st.toggle("Show timestamps", value=viewer.show_timestamps)

col_fmt, col_copy, col_dl = st.columns([2, 1, 1])
export_format = ExportFormat(
    col_fmt.selectbox("Export format", options=[f.value for f in ExportFormat])
)
if col_copy.button("Copy", key="copy"):
    result = viewer.copy(_clipboard_sink)
    if result.ok:
        # The browser may still refuse the write; the text block below is the fallback.
        st.toast(COPY_REQUESTED)
        st.session_state.show_copy_text = True
    else:
        _notify_failure(result)
col_dl.download_button(
    "Export",
    data=viewer.export_body(export_format),
    file_name=viewer.export_filename(export_format),
    mime=MIME_TYPES[export_format],
)

if st.session_state.get("show_copy_text"):
    with st.expander("Transcript text", expanded=True):
        st.code(viewer.export_body(), language=None)

st.markdown("---")

target = st.session_state.pop("scroll_target", None)
if viewer.is_empty:
    st.info(viewer.empty_message)
else:
    for view in viewer.segment_views():
        _render_segment(view, viewer)
    if target is not None:
        _scroll_to(segment_anchor(target))

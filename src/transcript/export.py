"""Transcript export: plain-text, JSON and CSV serialization plus sink delivery."""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from src.transcript.models import Segment, Transcript
from src.viewer_config import ExportFormat

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"

# "[mm:ss] Speaker: text" or "Speaker: text"; the speaker ends at the first ": ".
_LINE_RE = re.compile(r"^(?:\[(\d+):(\d{2})\] )?(.+?): (.*)$", re.DOTALL)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def format_timestamp(seconds: int | None) -> str:
    """Format seconds as ``mm:ss``; empty string when unavailable."""
    if seconds is None or seconds < 0:
        return ""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_segment(segment: Segment, timestamps: bool = True) -> str:
    """Format one segment as an export block."""
    label = format_timestamp(segment.timestamp_seconds) if timestamps else ""
    prefix = f"[{label}] " if label else ""
    return f"{prefix}{segment.speaker}: {segment.text}"


def export_text(segments: Sequence[Segment], timestamps: bool = True) -> str:
    """Serialize segments as blank-line-separated ``[mm:ss] Speaker: text`` blocks."""
    return BLOCK_SEPARATOR.join(format_segment(s, timestamps) for s in segments)


def export_json(
    transcript: Transcript,
    segments: Sequence[Segment],
    timestamps: bool = True,
) -> str:
    """Serialize the exported segments with transcript metadata as JSON."""
    payload = {
        "call_id": transcript.call_id,
        "transcript_id": transcript.id,
        "created_at": transcript.created_at,
        "segments": [
            {
                "speaker": s.speaker,
                "text": s.text,
                "timestamp_seconds": s.timestamp_seconds if timestamps else None,
                "confidence": s.confidence,
            }
            for s in segments
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_csv(segments: Sequence[Segment], timestamps: bool = True) -> str:
    """Serialize segments as CSV with a ``timestamp_seconds,speaker,text`` header."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["timestamp_seconds", "speaker", "text"])
    for s in segments:
        ts = s.timestamp_seconds if timestamps and s.timestamp_seconds is not None else ""
        writer.writerow([ts, s.speaker, s.text])
    return buf.getvalue()


def export_transcript(
    transcript: Transcript,
    segments: Sequence[Segment],
    format: str | ExportFormat = ExportFormat.TXT,
    timestamps: bool = True,
) -> str:
    """Dispatch to the serializer for *format*.

    Raises:
        ValueError: If *format* is not a known :class:`ExportFormat`.
    """
    fmt = ExportFormat(format)
    dispatch: dict[ExportFormat, Callable[[], str]] = {
        ExportFormat.TXT: lambda: export_text(segments, timestamps),
        ExportFormat.JSON: lambda: export_json(transcript, segments, timestamps),
        ExportFormat.CSV: lambda: export_csv(segments, timestamps),
    }
    return dispatch[fmt]()


@dataclass(frozen=True)
class ParsedBlock:
    """One block recovered from plain-text export output."""

    speaker: str
    text: str
    timestamp_seconds: int | None = None


def parse_exported_text(content: str) -> list[ParsedBlock]:
    """Parse :func:`export_text` output back into speaker/text blocks."""
    blocks: list[ParsedBlock] = []
    if not content:
        return blocks
    for block in content.split(BLOCK_SEPARATOR):
        m = _LINE_RE.match(block)
        if not m:
            continue
        minutes, secs, speaker, text = m.groups()
        ts = int(minutes) * 60 + int(secs) if minutes is not None else None
        blocks.append(ParsedBlock(speaker=speaker, text=text, timestamp_seconds=ts))
    return blocks


def export_filename(
    call_id: str | None,
    format: str | ExportFormat = ExportFormat.TXT,
    today: date | None = None,
) -> str:
    """Download file name embedding the call id and the ISO date.

    Characters outside ``[A-Za-z0-9_.-]`` in the call id become ``_`` so the
    name stays a single path component and is safe in a header value.
    """
    day = (today or date.today()).isoformat()
    safe_id = _UNSAFE_FILENAME_CHARS.sub("_", call_id or "") or "unknown"
    return f"transcript-{safe_id}-{day}.{ExportFormat(format).value}"


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of handing export text to a sink."""

    ok: bool
    message: str
    path: str | None = None


def deliver(
    sink: Callable[[str], object],
    text: str,
    success_message: str,
    failure_message: str,
) -> DeliveryResult:
    """Hand *text* to *sink*, reporting failure instead of raising."""
    try:
        result = sink(text)
    except Exception:
        logger.exception(failure_message)
        return DeliveryResult(ok=False, message=failure_message)
    path = str(result) if isinstance(result, Path) else None
    return DeliveryResult(ok=True, message=success_message, path=path)


def write_export_file(text: str, filename: str, directory: str | Path) -> Path:
    """File sink: write *text* under *directory* and return the path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / filename
    path.write_text(text, encoding="utf-8")
    return path


def copy_to_clipboard(text: str, sink: Callable[[str], object]) -> DeliveryResult:
    return deliver(
        sink,
        text,
        success_message="Transcript copied to clipboard",
        failure_message="Failed to copy transcript",
    )


def save_to_file(text: str, filename: str, directory: str | Path) -> DeliveryResult:
    return deliver(
        lambda body: write_export_file(body, filename, directory),
        text,
        success_message="Transcript exported successfully",
        failure_message="Failed to export transcript",
    )

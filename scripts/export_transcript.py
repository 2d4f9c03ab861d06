"""Fetch one call's transcript from the platform backend and write an export file."""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings
from src.transcript.speakers import ALL_SPEAKERS
from src.transcript.viewer import TranscriptViewer
from src.ui.api_client import fetch_transcript
from src.viewer_config import ExportFormat, TranscriptSource, ViewerConfig


def export_call_transcript(
    call_id: str,
    source: str = TranscriptSource.CALLS.value,
    speaker: str = ALL_SPEAKERS,
    format: str = ExportFormat.TXT.value,
    timestamps: bool = True,
    out_dir: str | None = None,
) -> int:
    """Export a transcript to *out_dir*; returns a process exit code."""
    viewer = TranscriptViewer(ViewerConfig.from_settings())
    viewer.load(call_id, lambda cid: fetch_transcript(cid, source))

    if viewer.error:
        print(f"ERROR {call_id}: {viewer.error}")
        return 1

    if speaker != ALL_SPEAKERS:
        viewer.set_speaker(speaker)
    viewer.show_timestamps = timestamps

    if viewer.is_empty:
        print(f"SKIP {call_id} -- {viewer.empty_message}")
        return 0

    result = viewer.download(out_dir or settings.export_dir, format)
    if not result.ok:
        print(f"ERROR {call_id}: {result.message}")
        return 1

    print(f"Wrote {len(viewer.filtered_segments)} segments to {result.path}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    parser = argparse.ArgumentParser()
    parser.add_argument("call_id")
    parser.add_argument("--source", default="calls", choices=[s.value for s in TranscriptSource])
    parser.add_argument("--speaker", default=ALL_SPEAKERS)
    parser.add_argument("--format", default="txt", choices=[f.value for f in ExportFormat])
    parser.add_argument("--no-timestamps", action="store_true")
    parser.add_argument("--out-dir", default=None)
    args = parser.parse_args()
    sys.exit(
        export_call_transcript(
            args.call_id,
            args.source,
            args.speaker,
            args.format,
            not args.no_timestamps,
            args.out_dir,
        )
    )

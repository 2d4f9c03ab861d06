"""Tests for transcript export formats, file naming and sink delivery."""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from pathlib import Path

import pytest

from src.transcript.export import (
    copy_to_clipboard,
    export_csv,
    export_filename,
    export_json,
    export_text,
    export_transcript,
    format_timestamp,
    parse_exported_text,
    save_to_file,
)
from src.transcript.models import Segment, Transcript
from src.viewer_config import ExportFormat

SEGMENTS = (
    Segment(speaker="agent", text="Hello there, how can I help?", timestamp_seconds=0),
    Segment(speaker="customer", text="I need help with my bill", timestamp_seconds=12),
    Segment(speaker="agent", text="Sure: let me check.", timestamp_seconds=125),
)
TRANSCRIPT = Transcript(id="t1", call_id="c1", segments=SEGMENTS, created_at="2026-10-01")


class TestFormatTimestamp:
    def test_minutes_seconds(self) -> None:
        assert format_timestamp(0) == "00:00"
        assert format_timestamp(125) == "02:05"

    def test_past_99_minutes(self) -> None:
        assert format_timestamp(6005) == "100:05"

    def test_unavailable(self) -> None:
        assert format_timestamp(None) == ""


class TestPlainText:
    def test_with_timestamps(self) -> None:
        assert export_text(SEGMENTS[:2]) == (
            "[00:00] agent: Hello there, how can I help?\n\n"
            "[00:12] customer: I need help with my bill"
        )

    def test_without_timestamps(self) -> None:
        assert export_text(SEGMENTS[:2], timestamps=False) == (
            "agent: Hello there, how can I help?\n\ncustomer: I need help with my bill"
        )

    def test_missing_timestamp_omits_bracket(self) -> None:
        out = export_text([Segment("user", "hi", None)])
        assert out == "user: hi"
        assert "NaN" not in out

    def test_empty(self) -> None:
        assert export_text([]) == ""

    def test_round_trip(self) -> None:
        parsed = parse_exported_text(export_text(SEGMENTS))
        assert [(p.speaker, p.text, p.timestamp_seconds) for p in parsed] == [
            (s.speaker, s.text, s.timestamp_seconds) for s in SEGMENTS
        ]

    def test_round_trip_without_timestamps(self) -> None:
        parsed = parse_exported_text(export_text(SEGMENTS, timestamps=False))
        assert [(p.speaker, p.text) for p in parsed] == [(s.speaker, s.text) for s in SEGMENTS]
        assert all(p.timestamp_seconds is None for p in parsed)


class TestStructuredFormats:
    def test_json(self) -> None:
        data = json.loads(export_json(TRANSCRIPT, SEGMENTS))
        assert data["call_id"] == "c1"
        assert data["transcript_id"] == "t1"
        assert data["segments"][2] == {
            "speaker": "agent",
            "text": "Sure: let me check.",
            "timestamp_seconds": 125,
            "confidence": None,
        }

    def test_csv(self) -> None:
        out = export_csv([*SEGMENTS, Segment("user", 'say "hi", ok', None)])
        rows = list(csv.reader(io.StringIO(out)))
        assert rows[0] == ["timestamp_seconds", "speaker", "text"]
        assert rows[3] == ["125", "agent", "Sure: let me check."]
        assert rows[4] == ["", "user", 'say "hi", ok']

    def test_dispatch(self) -> None:
        assert export_transcript(TRANSCRIPT, SEGMENTS, "txt") == export_text(SEGMENTS)
        assert export_transcript(TRANSCRIPT, SEGMENTS, ExportFormat.CSV) == export_csv(SEGMENTS)

    def test_unknown_format_raises(self) -> None:
        with pytest.raises(ValueError):
            export_transcript(TRANSCRIPT, SEGMENTS, "pdf")


class TestFilename:
    def test_embeds_call_id_and_date(self) -> None:
        assert export_filename("c1", today=date(2026, 10, 18)) == "transcript-c1-2026-10-18.txt"

    def test_extension_follows_format(self) -> None:
        assert export_filename("c1", "csv", date(2026, 1, 2)).endswith("-2026-01-02.csv")

    def test_call_id_path_characters_replaced(self) -> None:
        name = export_filename("../../escaped", today=date(2026, 10, 18))
        assert name == "transcript-.._.._escaped-2026-10-18.txt"
        assert "/" not in name

    def test_call_id_quote_replaced(self) -> None:
        assert export_filename('c"1 x', today=date(2026, 1, 2)) == "transcript-c_1_x-2026-01-02.txt"

    def test_unsafe_call_id_writes_inside_directory(self, tmp_path: Path) -> None:
        name = export_filename("../../escaped", today=date(2026, 10, 18))
        result = save_to_file("body", name, tmp_path)
        assert result.ok
        assert (tmp_path / name).read_text(encoding="utf-8") == "body"

    def test_missing_call_id(self) -> None:
        assert export_filename(None, today=date(2026, 1, 2)) == "transcript-unknown-2026-01-02.txt"


class TestSinks:
    def test_clipboard_success(self) -> None:
        received: list[str] = []
        result = copy_to_clipboard("body", received.append)
        assert result.ok
        assert received == ["body"]

    def test_clipboard_failure_reported(self) -> None:
        def broken(_: str) -> None:
            raise RuntimeError("clipboard unavailable")

        result = copy_to_clipboard("body", broken)
        assert not result.ok
        assert result.message == "Failed to copy transcript"

    def test_file_sink_writes(self, tmp_path: Path) -> None:
        result = save_to_file("body ✓", "t.txt", tmp_path / "out")
        assert result.ok
        assert result.path == str(tmp_path / "out" / "t.txt")
        assert (tmp_path / "out" / "t.txt").read_text(encoding="utf-8") == "body ✓"

    def test_file_sink_failure_reported(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        result = save_to_file("body", "t.txt", blocker)
        assert not result.ok
        assert result.message == "Failed to export transcript"

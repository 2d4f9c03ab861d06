"""Tests for the Streamlit viewer page (backend calls are mocked)."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from streamlit.testing.v1 import AppTest

from src.transcript.models import FetchResult

APP = str(Path(__file__).resolve().parent.parent / "src" / "ui" / "app.py")

RAW = {
    "callId": "c1",
    "speakers": [
        {"speaker": "agent", "text": "Hello there, how can I help?", "timestamp": 0},
        {"speaker": "customer", "text": "I need help with my bill", "timestamp": 12},
        {"speaker": "agent", "text": "Let me help you with that.", "timestamp": 20},
    ],
}


@pytest.fixture
def backend() -> Iterator[None]:
    with (
        patch("src.ui.api_client.fetch_transcript", return_value=FetchResult.success(RAW)),
        patch("src.ui.api_client.check_health", return_value=True),
    ):
        yield


def _open_call() -> AppTest:
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    at.text_input(key="call_id").input("c1")
    at.run()
    at.button(key="open").click()
    at.run()
    return at


def _captions(at: AppTest) -> list[str]:
    return [c.value for c in at.caption]


@pytest.mark.usefixtures("backend")
class TestViewerPage:
    def test_open_call(self) -> None:
        at = _open_call()
        assert not at.exception
        assert "3 segments · 00:20" in _captions(at)

    def test_counter_tracks_navigation(self) -> None:
        at = _open_call()
        at.text_input(key="query").input("help")
        at.run()
        assert "Match 1/3" in _captions(at)

        at.button(key="next_match").click()
        at.run()
        assert "Match 2/3" in _captions(at)

        at.button(key="prev_match").click()
        at.run()
        assert "Match 1/3" in _captions(at)

        at.button(key="prev_match").click()
        at.run()
        assert "Match 3/3" in _captions(at)
        assert not at.exception

    def test_copy_reports_request_and_shows_text(self) -> None:
        at = _open_call()
        at.button(key="copy").click()
        at.run()
        assert [t.value for t in at.toast] == [
            "Copy requested. If nothing was copied, use the copy icon on the text below."
        ]
        assert at.code[0].value.startswith("[00:00] agent: Hello there, how can I help?")

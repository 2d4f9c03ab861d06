"""Tests for the platform REST client (no network access required)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx

from src.ui.api_client import check_health, fetch_transcript


def _response(status_code: int = 200, body: object = None, bad_json: bool = False) -> MagicMock:
    r = MagicMock()
    r.status_code = status_code
    if bad_json:
        r.json.side_effect = ValueError("not json")
    else:
        r.json.return_value = body
    return r


def _settings(token: str = "") -> MagicMock:
    s = MagicMock()
    s.platform_api_url = "http://backend"
    s.platform_api_token = token
    s.request_timeout = 3.0
    return s


class TestFetchTranscript:
    def test_success_envelope(self) -> None:
        body = {"success": True, "data": {"id": "t1", "speakers": []}}
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, body)) as get,
        ):
            result = fetch_transcript("c1")
        assert result.ok
        assert result.data == {"id": "t1", "speakers": []}
        assert get.call_args.args[0] == "http://backend/api/calls/c1/transcript"
        assert get.call_args.kwargs["timeout"] == 3.0
        assert "Authorization" not in get.call_args.kwargs["headers"]

    def test_dialer_source(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, {"data": {}})) as get,
        ):
            fetch_transcript("c9", "dialer")
        assert get.call_args.args[0] == "http://backend/api/dialer/calls/c9/transcript"

    def test_bare_payload_accepted(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, {"speakers": []})),
        ):
            result = fetch_transcript("c1")
        assert result.ok
        assert result.data == {"speakers": []}

    def test_bearer_token(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings(token="secret")),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, {"data": {}})) as get,
        ):
            fetch_transcript("c1")
        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"

    def test_not_found(self) -> None:
        body = {"error": "Transcript not found"}
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(404, body)),
        ):
            result = fetch_transcript("c1")
        assert not result.ok
        assert result.error == "Transcript not found"
        assert result.status_code == 404

    def test_server_error_prefers_message(self) -> None:
        body = {"error": "Failed to fetch transcript", "message": "db timeout"}
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(500, body)),
        ):
            result = fetch_transcript("c1")
        assert result.error == "db timeout"

    def test_unsuccessful_envelope(self) -> None:
        body = {"success": False, "error": {"message": "Call is still in progress"}}
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, body)),
        ):
            result = fetch_transcript("c1")
        assert not result.ok
        assert result.error == "Call is still in progress"

    def test_non_json_error(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(502, bad_json=True)),
        ):
            result = fetch_transcript("c1")
        assert result.error == "Failed to load transcript (HTTP 502)"

    def test_connection_error(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", side_effect=httpx.ConnectError("refused")),
        ):
            result = fetch_transcript("c1")
        assert not result.ok
        assert result.error is not None
        assert "refused" in result.error

    def test_missing_data(self) -> None:
        with (
            patch("src.ui.api_client.settings", _settings()),
            patch("src.ui.api_client.httpx.get", return_value=_response(200, None)),
        ):
            result = fetch_transcript("c1")
        assert not result.ok


class TestHealth:
    def test_healthy(self) -> None:
        with patch("src.ui.api_client.httpx.get", return_value=_response(200, {})):
            assert check_health()

    def test_unreachable(self) -> None:
        with patch("src.ui.api_client.httpx.get", side_effect=httpx.ConnectError("down")):
            assert not check_health()

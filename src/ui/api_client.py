"""HTTP client wrapper for the voice-agent platform REST backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import settings
from src.transcript.models import FetchResult
from src.viewer_config import TranscriptSource

logger = logging.getLogger(__name__)

TRANSCRIPT_PATHS: dict[TranscriptSource, str] = {
    TranscriptSource.CALLS: "/api/calls/{call_id}/transcript",
    TranscriptSource.DIALER: "/api/dialer/calls/{call_id}/transcript",
}

DEFAULT_ERROR = "Failed to load transcript"


def _headers() -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if settings.platform_api_token:
        headers["Authorization"] = f"Bearer {settings.platform_api_token}"
    return headers


def _error_message(body: Any) -> str | None:
    """Extract a human-readable message from a backend error body.

    Handles ``{"error": {"message": ...}}`` and ``{"error": ..., "message": ...}``.
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    message = body.get("message") or error
    return str(message) if message else None


def check_health() -> bool:
    """Return True if the platform backend responds to /health."""
    try:
        r = httpx.get(f"{settings.platform_api_url}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.HTTPError:
        return False


def fetch_transcript(
    call_id: str,
    source: str | TranscriptSource = TranscriptSource.CALLS,
) -> FetchResult:
    """Fetch the raw transcript payload for *call_id*.

    Never raises for transport or backend errors; those come back as a
    failure envelope carrying a message suitable for display.
    """
    path = TRANSCRIPT_PATHS[TranscriptSource(source)].format(call_id=call_id)
    try:
        r = httpx.get(
            f"{settings.platform_api_url}{path}",
            headers=_headers(),
            timeout=settings.request_timeout,
        )
    except httpx.HTTPError as e:
        logger.warning("Transcript fetch for call %s failed: %s", call_id, e)
        return FetchResult.failure(f"{DEFAULT_ERROR}: {e}")

    try:
        body = r.json()
    except ValueError:
        body = None

    if r.status_code >= 400:
        message = _error_message(body) or f"{DEFAULT_ERROR} (HTTP {r.status_code})"
        logger.warning("Transcript fetch for call %s returned %d: %s", call_id, r.status_code, message)
        return FetchResult.failure(message, r.status_code)

    if isinstance(body, dict) and body.get("success") is False:
        message = _error_message(body) or DEFAULT_ERROR
        logger.warning("Transcript fetch for call %s unsuccessful: %s", call_id, message)
        return FetchResult.failure(message, r.status_code)

    data = body.get("data") if isinstance(body, dict) and "data" in body else body
    if data is None:
        return FetchResult.failure(DEFAULT_ERROR, r.status_code)
    return FetchResult.success(data, r.status_code)

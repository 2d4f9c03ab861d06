"""Viewer configuration: source/format enums and the ViewerConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.config import Settings, settings


class TranscriptSource(str, Enum):
    """Backend endpoint family a transcript is fetched from."""

    CALLS = "calls"
    DIALER = "dialer"


class ExportFormat(str, Enum):
    """Available export serializations."""

    TXT = "txt"
    JSON = "json"
    CSV = "csv"


@dataclass(frozen=True)
class ViewerConfig:
    """Immutable presentation constants for the transcript viewer.

    Defaults mirror the dashboard's behaviour (300-character collapsed
    segments, 50 characters of search context each side).
    """

    truncate_chars: int = 300
    context_chars: int = 50
    agent_markers: tuple[str, ...] = ("agent", "assistant")
    show_timestamps: bool = True

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> ViewerConfig:
        """Build a config from application settings (the cached ones by default)."""
        s = source or settings
        return cls(truncate_chars=s.truncate_chars, context_chars=s.context_chars)

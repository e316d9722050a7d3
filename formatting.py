"""Display formatting for the recorder window."""

from __future__ import annotations

from datetime import datetime


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as MM:SS; minutes wrap at one hour."""
    total_seconds = max(int(seconds), 0)
    minutes = (total_seconds // 60) % 60
    secs = total_seconds % 60
    return f"{minutes:02d}:{secs:02d}"


def format_timestamp(value: datetime) -> str:
    """Locale date and time, e.g. 10/18/26 14:03:22."""
    return value.strftime("%x %X")

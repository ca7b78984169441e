"""
Session Guard - UI: Countdown Formatting
"""

from typing import Optional


def format_countdown(seconds: Optional[int]) -> str:
    """
    Format remaining seconds for the session header.

    H:MM:SS when at least an hour remains, otherwise M:SS.
    None or 0 renders as an empty string.
    """
    if not seconds:
        return ""

    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"

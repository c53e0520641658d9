"""
Session id allocation.

Rules:
- Session ids are monotonic integers.
- They are allocated ONLY by PlaybackSessionManager.
- A value of 0 means "no session has been started yet".
- Once an id is handed out, it is never reused.
"""

from __future__ import annotations


class SessionIdAllocator:
    """Monotonic generation counter for playback sessions."""

    def __init__(self) -> None:
        self._last = 0

    @property
    def last(self) -> int:
        """Most recently allocated id (0 before the first allocation)."""
        return self._last

    def next(self) -> int:
        self._last += 1
        return self._last

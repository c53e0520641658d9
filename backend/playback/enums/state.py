"""
Playback stream state enumeration.

Rules:
- This enum defines ONLY the session lifecycle states.
- No behavior, no helper methods, no side effects.
- Transitions are owned exclusively by PlaybackSessionManager.
"""

from __future__ import annotations

from enum import Enum


class StreamState(str, Enum):
    """
    Lifecycle state of a single playback session.

    IDLE is both the initial state and the terminal state of every session.
    STOPPING covers the window between a stop/replace request and confirmed
    release of the publish channel.
    """

    IDLE = "IDLE"
    PLAYING = "PLAYING"
    STOPPING = "STOPPING"

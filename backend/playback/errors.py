"""
Playback error taxonomy.

Every failure surfaced by PlaybackSessionManager.start() is one of these.
`code` is the stable discriminant used in logs and HTTP error bodies.
"""

from __future__ import annotations


class PlaybackError(Exception):
    """Base class for playback errors."""

    code = "PlaybackError"


class SourceNotFound(PlaybackError):
    """
    Raised when a source reference does not name a stored source.

    Raised before any session state is touched; the active session (if any)
    keeps playing.
    """

    code = "NotFound"


class DecodeError(PlaybackError):
    """
    Raised when a stored source cannot be decoded into samples.

    Indicates a corrupt, truncated or unsupported container.
    """

    code = "DecodeError"


class TransportError(PlaybackError):
    """
    Raised when the publish channel fails to open, send or close.

    No retry or reconnect is attempted by the caller.
    """

    code = "TransportError"


class StartSuperseded(PlaybackError):
    """
    Raised when a later start() or stop() was issued while this start() was
    still resolving or decoding its source.

    The abandoned start never opens a channel or touches the active session.
    """

    code = "Superseded"

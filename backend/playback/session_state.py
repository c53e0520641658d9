"""
Playback session containers.

PlaybackSession is mutable and owned exclusively by PlaybackSessionManager;
the emission loop advances its counters only while its session id is current.
PlaybackStatus is the immutable read model handed to callers.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from audio.frames import ChunkFrame
from playback.enums.state import StreamState


@dataclass
class PlaybackSession:
    """Mutable runtime container for a single playback session."""

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    session_id: int
    source_ref: str
    sample_rate: int
    chunk_size: int
    total_samples: int
    created_at: float = field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Progress counters
    # ------------------------------------------------------------------

    cursor: int = 0
    bytes_sent: int = 0
    frames_sent: int = 0

    state: StreamState = StreamState.IDLE

    # Set when the session is stopped or replaced; wakes the emission loop
    # out of its inter-frame wait.
    wake: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def finished(self) -> bool:
        return self.cursor >= self.total_samples

    def advance(self, frame: ChunkFrame) -> None:
        """
        Account for a frame that the channel accepted.

        Frames must arrive in cursor order; anything else is a bug.
        """
        if frame.start != self.cursor:
            raise ValueError(
                f"out-of-order frame (cursor={self.cursor}, frame_start={frame.start})"
            )
        if frame.end > self.total_samples:
            raise ValueError(
                f"frame overruns source (end={frame.end}, total={self.total_samples})"
            )
        self.cursor = frame.end
        self.bytes_sent += frame.byte_length
        self.frames_sent += 1

    def log_context(self) -> dict[str, Any]:
        """Standard logging context for this session."""
        return {
            "session_id": self.session_id,
            "source_ref": self.source_ref,
            "state": self.state.value,
            "cursor": self.cursor,
            "total_samples": self.total_samples,
            "bytes_sent": self.bytes_sent,
            "frames_sent": self.frames_sent,
        }


@dataclass(frozen=True)
class PlaybackStatus:
    """Point-in-time view of the session slot."""

    state: StreamState = StreamState.IDLE
    source_ref: str | None = None
    bytes_sent: int = 0

    @property
    def playing(self) -> bool:
        return self.state is StreamState.PLAYING

    def to_dict(self) -> dict[str, Any]:
        return {
            "playing": self.playing,
            "currentFile": self.source_ref,
            "bytesSent": self.bytes_sent,
            "state": self.state.value,
        }

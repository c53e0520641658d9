"""
Chunk emission loop.

Responsibilities:
- Carve the session's sample sequence into chunk frames in cursor order
- Hand each frame to the publish channel and wait for the send to finish
- Pace frames on a fixed cadence measured on the event loop clock
- Advance session counters (cursor, bytes_sent, frames_sent)
- Stop touching the session and channel as soon as its id is no longer current

Non-responsibilities:
- NO channel open/close (the manager owns the channel lifecycle)
- NO state transitions or broadcasts
- NO retries
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from adapters.publish.base import PublishChannel
from audio.frame_generator import take_frame
from playback.errors import TransportError
from playback.session_state import PlaybackSession
from spec import EMIT_INTERVAL_MS


IsCurrentFn = Callable[[int], bool]


class EmissionOutcome(str, Enum):
    """How an emission loop ended."""

    COMPLETED = "completed"      # every sample was sent
    SUPERSEDED = "superseded"    # stopped or replaced; nothing else to do
    FAILED = "failed"            # transport error mid-session


@dataclass(frozen=True)
class EmissionResult:
    outcome: EmissionOutcome
    error: Exception | None = None


class ChunkEmissionLoop:
    """
    Paced frame publisher bound to one session id.

    The generation check (is_current) runs before every frame and again after
    every send. Once it fails, the loop returns SUPERSEDED without advancing
    the session or touching the channel again.
    """

    def __init__(
        self,
        *,
        session: PlaybackSession,
        samples: np.ndarray,
        channel: PublishChannel,
        is_current: IsCurrentFn,
        interval_ms: float = EMIT_INTERVAL_MS,
    ) -> None:
        if samples.shape[0] != session.total_samples:
            raise ValueError("samples length does not match session.total_samples")
        self._session = session
        self._samples = samples
        self._channel = channel
        self._is_current = is_current
        self._interval_s = interval_ms / 1000.0

    @property
    def session_id(self) -> int:
        return self._session.session_id

    async def run(self) -> EmissionResult:
        session = self._session
        clock = asyncio.get_running_loop()
        next_tick = clock.time()

        while True:
            if not self._is_current(session.session_id):
                return EmissionResult(EmissionOutcome.SUPERSEDED)

            if session.finished:
                return EmissionResult(EmissionOutcome.COMPLETED)

            frame = take_frame(
                self._samples,
                session.cursor,
                chunk_size=session.chunk_size,
                index=session.frames_sent,
            )

            try:
                await self._channel.send(frame.pcm_bytes)
            except TransportError as exc:
                if not self._is_current(session.session_id):
                    return EmissionResult(EmissionOutcome.SUPERSEDED)
                return EmissionResult(EmissionOutcome.FAILED, exc)

            # A send that was in flight when the session was superseded is
            # not accounted to it.
            if not self._is_current(session.session_id):
                return EmissionResult(EmissionOutcome.SUPERSEDED)

            session.advance(frame)

            next_tick += self._interval_s
            delay = next_tick - clock.time()
            if delay <= 0:
                # Behind schedule: resync instead of bursting to catch up.
                next_tick = clock.time()
                await asyncio.sleep(0)
                continue

            await self._wait(delay)

    async def _wait(self, delay: float) -> None:
        """Sleep until the next tick, waking early if the session is stopped."""
        try:
            await asyncio.wait_for(self._session.wake.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

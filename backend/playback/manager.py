"""
Playback session manager.

Responsibilities:
- Own the single playback session slot (at most one PLAYING session,
  process-wide)
- Resolve and decode sources, open the publish channel, start the emission loop
- Serialize start/stop so concurrent commands never interleave partial updates
- Release every session's channel exactly once, whatever ended it
  (stop, completion, replacement, error)
- Drive status broadcasts through the StatusNotifier

Non-responsibilities:
- NO frame splitting or pacing (ChunkEmissionLoop)
- NO transport details (PublishChannel implementations)
- NO HTTP/WebSocket handling
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from adapters.publish.base import ChannelFactory, PublishChannel
from audio.decoder import DecodedSource, decode_source
from observability.logger import log_event
from observability.metrics import timed
from playback.emitter import ChunkEmissionLoop, EmissionOutcome, EmissionResult
from playback.enums.state import StreamState
from playback.errors import StartSuperseded, TransportError
from playback.session_ids import SessionIdAllocator
from playback.session_state import PlaybackSession, PlaybackStatus
from session.status_notifier import StatusNotifier, status_event
from spec import CHUNK_SIZE_SAMPLES, EMIT_INTERVAL_MS, STOP_DRAIN_TIMEOUT_MS


DecodeFn = Callable[[Path], DecodedSource]


class SourceResolver(Protocol):
    def resolve(self, source_ref: str) -> Path: ...


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class _ActiveSession:
    """Everything owned by the session in the slot."""

    session: PlaybackSession
    channel: PublishChannel
    loop: ChunkEmissionLoop
    task: asyncio.Task[None] | None = None
    released: bool = False


class PlaybackSessionManager:
    """
    Single-flight playback session owner.

    Concurrency model:
    - One asyncio event loop; start()/stop() serialize on one asyncio.Lock.
    - The slot (self._active) is swapped out synchronously before any await
      in a teardown, which is what invalidates the old generation.
    - The emission task's completion path never takes the lock: it checks its
      generation and releases in one synchronous step, so it cannot deadlock
      against a stop() that is waiting for it to exit.
    - Every start()/stop() takes a request ticket before its first await.
      A start() whose ticket was overtaken while it decoded gives up with
      StartSuperseded instead of acquiring the slot.
    """

    def __init__(
        self,
        *,
        store: SourceResolver,
        channel_factory: ChannelFactory,
        notifier: StatusNotifier,
        decode: DecodeFn = decode_source,
        chunk_size: int = CHUNK_SIZE_SAMPLES,
        interval_ms: float = EMIT_INTERVAL_MS,
        stop_timeout_ms: int = STOP_DRAIN_TIMEOUT_MS,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self._store = store
        self._channel_factory = channel_factory
        self._notifier = notifier
        self._decode = decode
        self._chunk_size = chunk_size
        self._interval_ms = interval_ms
        self._stop_timeout_s = stop_timeout_ms / 1000.0

        self._lock = asyncio.Lock()
        self._ids = SessionIdAllocator()
        self._active: _ActiveSession | None = None
        self._last: PlaybackSession | None = None
        # Bumped synchronously by every start()/stop() call on arrival; the
        # last-issued command wins regardless of decode latency.
        self._requested = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def current_session_id(self) -> int:
        """Id of the PLAYING session, or 0 when idle."""
        active = self._active
        return active.session.session_id if active is not None else 0

    def is_current(self, session_id: int) -> bool:
        active = self._active
        return (
            active is not None
            and active.session.session_id == session_id
            and active.session.state is StreamState.PLAYING
        )

    def status(self) -> PlaybackStatus:
        """
        Pure read of the session slot. Never awaits.

        After a session ends, its source_ref and final bytes_sent stay visible
        until the next session starts.
        """
        active = self._active
        session = active.session if active is not None else self._last
        if session is None:
            return PlaybackStatus()
        return PlaybackStatus(
            state=session.state,
            source_ref=session.source_ref,
            bytes_sent=session.bytes_sent,
        )

    def status_event(self) -> dict[str, Any]:
        """Snapshot for newly connected observers."""
        active = self._active
        if active is None:
            return status_event(playing=False)
        return status_event(playing=True, current_file=active.session.source_ref)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self, source_ref: str) -> int:
        """
        Start streaming a stored source, replacing any active session.

        Returns the new session id as soon as the emission task is scheduled.

        Raises:
            SourceNotFound, DecodeError: nothing was touched.
            TransportError: the channel could not be opened; any previous
                session has already been released.
            StartSuperseded: a later start() or stop() arrived while the
                source was decoding; nothing was touched.
        """
        path = self._store.resolve(source_ref)
        ticket = self._take_ticket()

        with timed("source_decode", details={"source_ref": source_ref}):
            decoded = await asyncio.to_thread(self._decode, path)

        async with self._lock:
            if ticket != self._requested:
                log_event({
                    "ts_ms": _now_ms(),
                    "event_type": "PLAYBACK_START_SUPERSEDED",
                    "source_ref": source_ref,
                    "ticket": ticket,
                    "latest_ticket": self._requested,
                })
                raise StartSuperseded(
                    f"start({source_ref!r}) overtaken by a later command"
                )

            replaced = await self._teardown(reason="replaced")

            session = PlaybackSession(
                session_id=self._ids.next(),
                source_ref=source_ref,
                sample_rate=decoded.sample_rate,
                chunk_size=self._chunk_size,
                total_samples=int(decoded.samples.shape[0]),
            )

            channel = self._channel_factory()
            try:
                await channel.open()
            except TransportError as exc:
                log_event({
                    "ts_ms": _now_ms(),
                    "event_type": "CHANNEL_OPEN_FAILED",
                    "session_id": session.session_id,
                    "source_ref": source_ref,
                    "error": str(exc),
                })
                if replaced is not None:
                    self._notifier.broadcast(status_event(playing=False))
                raise

            session.state = StreamState.PLAYING
            active = _ActiveSession(
                session=session,
                channel=channel,
                loop=ChunkEmissionLoop(
                    session=session,
                    samples=decoded.samples,
                    channel=channel,
                    is_current=self.is_current,
                    interval_ms=self._interval_ms,
                ),
            )
            self._active = active
            self._last = session
            active.task = asyncio.create_task(
                self._run(active),
                name=f"playback-session-{session.session_id}",
            )

            log_event({
                "ts_ms": _now_ms(),
                "event_type": "PLAYBACK_STARTED",
                **session.log_context(),
                "sample_rate": decoded.sample_rate,
                "channels": decoded.channels,
                "replaced_session_id": replaced.session_id if replaced else None,
            })
            self._notifier.broadcast(
                status_event(playing=True, current_file=source_ref)
            )
            return session.session_id

    async def stop(self) -> bool:
        """
        Stop the active session. Idempotent.

        Returns True if a session was stopped. When this returns, no further
        frame will be emitted for the stopped session, and any start() still
        decoding when stop() was called is abandoned.
        """
        self._take_ticket()
        async with self._lock:
            stopped = await self._teardown(reason="stopped")
            if stopped is None:
                return False
            self._notifier.broadcast(status_event(playing=False))
            return True

    async def shutdown(self) -> None:
        """Stop playback on application shutdown."""
        await self.stop()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _take_ticket(self) -> int:
        self._requested += 1
        return self._requested

    async def _teardown(self, *, reason: str) -> PlaybackSession | None:
        """
        Shared stop/replace path. Caller holds self._lock.

        Returns the torn-down session, or None if the slot was empty.
        """
        active = self._active
        if active is None:
            return None

        # Invalidate the generation before the first await.
        self._active = None
        active.session.state = StreamState.STOPPING
        active.session.wake.set()

        try:
            await self._drain(active)
        finally:
            self._release(active, reason=reason)
        return active.session

    async def _drain(self, active: _ActiveSession) -> None:
        """
        Wait for the emission task to exit.

        A send already handed to the channel is allowed to finish; a task that
        does not exit within the stop timeout is cancelled.
        """
        task = active.task
        if task is None or task.done() or task is asyncio.current_task():
            return
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=self._stop_timeout_s)
        except asyncio.TimeoutError:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "PLAYBACK_DRAIN_TIMEOUT",
                "session_id": active.session.session_id,
                "timeout_ms": int(self._stop_timeout_s * 1000),
            })
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        finally:
            if not task.done():
                task.cancel()

    def _release(self, active: _ActiveSession, *, reason: str) -> None:
        """
        Close the channel and return the session to IDLE.

        Idempotent; runs exactly once per session.
        """
        if active.released:
            return
        active.released = True
        session = active.session

        try:
            active.channel.close()
        except TransportError as exc:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "CHANNEL_CLOSE_FAILED",
                "session_id": session.session_id,
                "error": str(exc),
            })

        session.state = StreamState.IDLE
        log_event({
            "ts_ms": _now_ms(),
            "event_type": f"PLAYBACK_{reason.upper()}",
            **session.log_context(),
        })

    async def _run(self, active: _ActiveSession) -> None:
        """Emission task body: run the loop, then settle the session."""
        try:
            result = await active.loop.run()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "PLAYBACK_LOOP_CRASHED",
                "session_id": active.session.session_id,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            result = EmissionResult(EmissionOutcome.FAILED, exc)

        self._settle(active, result)

    def _settle(self, active: _ActiveSession, result: EmissionResult) -> None:
        """
        Natural end of a session (completed or failed).

        Synchronous: the generation check and the slot mutation happen with no
        suspension point in between.
        """
        if self._active is not active:
            # Stopped or replaced; the teardown owner releases it.
            return

        self._active = None
        if result.outcome is EmissionOutcome.FAILED:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "PLAYBACK_SEND_ERROR",
                "session_id": active.session.session_id,
                "error": str(result.error),
            })
            self._release(active, reason="failed")
        else:
            self._release(active, reason="completed")

        self._notifier.broadcast(status_event(playing=False))

"""
Status notifier (observer registry).

Responsibilities:
- Track connected observers independently of any transport
- Fan out status events to every observer (fire-and-forget)
- Hand each new observer a welcome message and a current-state snapshot
  before any later broadcast

Non-responsibilities:
- No WebSocket handling (routes drain observer queues)
- No playback state (the snapshot comes from a provider callback)
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable

from observability.logger import log_event
from spec import OBSERVER_QUEUE_MAX, WELCOME_VERSION


SnapshotFn = Callable[[], dict[str, Any]]

FILES_UPDATED: dict[str, Any] = {"type": "files-updated"}


def status_event(*, playing: bool, current_file: str | None = None) -> dict[str, Any]:
    """Build a full (non-delta) status event."""
    event: dict[str, Any] = {"type": "status", "playing": playing}
    if current_file is not None:
        event["currentFile"] = current_file
    return event


def welcome_event(version: str = WELCOME_VERSION) -> dict[str, Any]:
    return {"type": "welcome", "version": version}


class ObserverDropped(Exception):
    """Raised to the transport once a dropped observer's backlog is drained."""


class ObserverHandle:
    """
    One connected observer.

    Messages are buffered in FIFO order; the transport drains them with
    next_message().
    """

    def __init__(self, observer_id: int, *, maxsize: int = OBSERVER_QUEUE_MAX) -> None:
        self.observer_id = observer_id
        self.dropped = False
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)

    def offer(self, msg: dict[str, Any]) -> bool:
        """Enqueue without blocking. Returns False if the queue is full."""
        try:
            self._queue.put_nowait(msg)
        except asyncio.QueueFull:
            return False
        return True

    async def next_message(self) -> dict[str, Any]:
        """
        Wait for the next message.

        Raises:
            ObserverDropped once the observer was dropped and nothing is left.
        """
        if self.dropped and self._queue.empty():
            raise ObserverDropped(f"observer {self.observer_id} dropped")
        return await self._queue.get()

    def drain(self) -> tuple[dict[str, Any], ...]:
        """Pop every pending message without waiting."""
        out: list[dict[str, Any]] = []
        while not self._queue.empty():
            out.append(self._queue.get_nowait())
        return tuple(out)


class StatusNotifier:
    """Transport-independent registry of status observers."""

    def __init__(
        self,
        *,
        version: str = WELCOME_VERSION,
        snapshot: SnapshotFn | None = None,
        queue_max: int = OBSERVER_QUEUE_MAX,
    ) -> None:
        self._version = version
        self._snapshot = snapshot
        self._queue_max = queue_max
        self._observers: dict[int, ObserverHandle] = {}
        self._ids = itertools.count(1)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def bind_snapshot(self, snapshot: SnapshotFn) -> None:
        """Attach the current-state provider (the playback manager)."""
        self._snapshot = snapshot

    def subscribe(self) -> ObserverHandle:
        """
        Register a new observer.

        Welcome and snapshot are enqueued in the same synchronous step as
        registration, so no broadcast can be delivered ahead of them and the
        snapshot cannot predate a transition the observer misses.
        """
        handle = ObserverHandle(next(self._ids), maxsize=self._queue_max)
        handle.offer(welcome_event(self._version))
        snapshot = self._snapshot() if self._snapshot is not None else status_event(playing=False)
        handle.offer(snapshot)
        self._observers[handle.observer_id] = handle

        log_event({
            "event_type": "OBSERVER_CONNECTED",
            "observer_id": handle.observer_id,
            "observers": len(self._observers),
        })
        return handle

    def unsubscribe(self, handle: ObserverHandle) -> None:
        """Idempotent."""
        if self._observers.pop(handle.observer_id, None) is None:
            return
        log_event({
            "event_type": "OBSERVER_DISCONNECTED",
            "observer_id": handle.observer_id,
            "observers": len(self._observers),
        })

    def broadcast(self, event: dict[str, Any]) -> None:
        """
        Deliver an event to every current observer.

        Never blocks and never raises. Observers that cannot keep up are
        dropped.
        """
        for handle in list(self._observers.values()):
            if handle.offer(dict(event)):
                continue
            self._observers.pop(handle.observer_id, None)
            handle.dropped = True
            log_event({
                "event_type": "OBSERVER_DROPPED",
                "observer_id": handle.observer_id,
                "reason": "queue_full",
                "dropped_event": event.get("type"),
            })

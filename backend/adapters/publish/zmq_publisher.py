"""
ZeroMQ PUB channel.

Role in the system:
- Opens one PUB socket per playback session against the configured endpoint.
- Publishes each chunk frame as a single-part binary message.

Architectural constraints:
- PUB sockets never block on slow or absent subscribers; messages beyond
  the high-water mark are dropped by ZeroMQ.
- No retries, timers or reconnect logic live here.
"""

from __future__ import annotations

import zmq
import zmq.asyncio

from adapters.publish.base import PublishChannel
from observability.logger import log_event
from playback.errors import TransportError


class ZmqPublishChannel(PublishChannel):
    """
    Publish channel backed by a zmq.asyncio PUB socket.

    bind=False connects to a remote subscriber that owns the endpoint
    (the default deployment); bind=True makes this process the endpoint.
    """

    def __init__(
        self,
        *,
        address: str,
        bind: bool = False,
        context: zmq.asyncio.Context | None = None,
    ) -> None:
        self._address = address
        self._bind = bind
        self._context = context
        self._socket: zmq.asyncio.Socket | None = None

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    async def open(self) -> None:
        if self._socket is not None:
            raise TransportError(f"publisher already open on {self._address}")

        context = self._context or zmq.asyncio.Context.instance()
        try:
            socket = context.socket(zmq.PUB)
        except zmq.ZMQError as exc:
            raise TransportError(f"cannot create PUB socket: {exc}") from exc

        socket.setsockopt(zmq.LINGER, 0)
        try:
            if self._bind:
                socket.bind(self._address)
            else:
                socket.connect(self._address)
        except zmq.ZMQError as exc:
            socket.close(linger=0)
            raise TransportError(
                f"cannot open publisher on {self._address}: {exc}"
            ) from exc

        self._socket = socket
        log_event({
            "event_type": "PUBLISHER_OPENED",
            "address": self._address,
            "mode": "bind" if self._bind else "connect",
        })

    async def send(self, payload: bytes) -> None:
        socket = self._socket
        if socket is None:
            raise TransportError("publisher is closed")
        try:
            await socket.send(payload)
        except zmq.ZMQError as exc:
            raise TransportError(f"send failed on {self._address}: {exc}") from exc

    def close(self) -> None:
        socket = self._socket
        if socket is None:
            return
        self._socket = None
        socket.close(linger=0)
        log_event({
            "event_type": "PUBLISHER_CLOSED",
            "address": self._address,
        })

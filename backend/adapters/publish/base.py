"""
Publish channel contract.

This module defines the *interface only*. No chunking, pacing, retries or
session decisions live here.

Key invariants:
- One channel instance serves exactly one playback session.
- Session ids are owned by PlaybackSessionManager. Channels never see them.
- Delivery is best-effort and fire-and-forget: no acknowledgment, no
  retransmission, no framing beyond one payload per message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class PublishChannel(ABC):
    """
    Abstract interface for a pub/sub publish channel.

    Implementations are responsible for:
    - Opening the underlying transport endpoint via open()
    - Sending one binary payload per message via send()
    - Releasing the endpoint via close()

    Non-responsibilities:
    - No frame splitting or pacing
    - No playback state
    - No reconnect policy
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport endpoint.

        Contract:
        - Raises TransportError if the endpoint cannot be opened.
        - On failure the implementation releases anything it allocated;
          the caller does not call close().
        """
        raise NotImplementedError

    @abstractmethod
    async def send(self, payload: bytes) -> None:
        """
        Publish one binary message.

        Contract:
        - Returns once the transport has accepted the payload.
        - Raises TransportError if the channel is closed or the send fails.
        - MUST NOT retry internally.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """
        Release the transport endpoint.

        Contract:
        - MUST be idempotent: repeated calls are safe no-ops.
        - Pending unsent messages are discarded (no linger).
        """
        raise NotImplementedError


ChannelFactory = Callable[[], PublishChannel]

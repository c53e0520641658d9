"""
One-shot file publisher.

Decodes a single source and streams it once over a publish channel at the
same cadence as a managed session, without the session manager, observers or
HTTP surface. Used by tools/send_wav.py.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from adapters.publish.base import PublishChannel
from audio.decoder import decode_source
from observability.logger import log_event
from playback.emitter import ChunkEmissionLoop, EmissionResult
from playback.enums.state import StreamState
from playback.session_state import PlaybackSession
from spec import CHUNK_SIZE_SAMPLES, EMIT_INTERVAL_MS


async def publish_file(
    path: Path,
    channel: PublishChannel,
    *,
    chunk_size: int = CHUNK_SIZE_SAMPLES,
    interval_ms: float = EMIT_INTERVAL_MS,
) -> PlaybackSession:
    """
    Stream one file to completion, then close the channel.

    Raises:
        DecodeError, TransportError
    """
    decoded = await asyncio.to_thread(decode_source, path)
    log_event({
        "event_type": "ONESHOT_DECODED",
        "source": path.name,
        "sample_rate": decoded.sample_rate,
        "channels": decoded.channels,
        "total_samples": int(decoded.samples.shape[0]),
    })

    session = PlaybackSession(
        session_id=1,
        source_ref=path.name,
        sample_rate=decoded.sample_rate,
        chunk_size=chunk_size,
        total_samples=int(decoded.samples.shape[0]),
        state=StreamState.PLAYING,
    )

    await channel.open()
    try:
        result: EmissionResult = await ChunkEmissionLoop(
            session=session,
            samples=decoded.samples,
            channel=channel,
            is_current=lambda sid: sid == session.session_id,
            interval_ms=interval_ms,
        ).run()
    finally:
        channel.close()
        session.state = StreamState.IDLE

    if result.error is not None:
        raise result.error

    log_event({
        "event_type": "ONESHOT_FINISHED",
        **session.log_context(),
    })
    return session

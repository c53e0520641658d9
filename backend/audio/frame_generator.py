"""
Sample frame splitting utilities (pure).

Purpose:
- Carve a decoded float32 sample sequence into fixed-size chunk frames
  for publishing over the pub/sub transport.

Invariants:
- float32 little-endian, mono
- Frames hold at most chunk_size samples
- The final frame keeps the remainder (never padded, never dropped)

Design:
- Pure functions only (no channels, no timing, no IO).
"""

from __future__ import annotations

import numpy as np

from audio.frames import ChunkFrame
from spec import CHUNK_SIZE_SAMPLES, SAMPLE_WIDTH_BYTES


def take_frame(
    samples: np.ndarray,
    cursor: int,
    *,
    chunk_size: int = CHUNK_SIZE_SAMPLES,
    index: int = 0,
) -> ChunkFrame:
    """
    Return the frame starting at `cursor`, clipped to the sequence end.

    Raises:
        ValueError if chunk_size is not positive or cursor is out of range.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    total = int(samples.shape[0])
    if cursor < 0 or cursor >= total:
        raise ValueError(f"cursor out of range (cursor={cursor}, total={total})")

    return ChunkFrame(
        index=index,
        start=cursor,
        samples=samples[cursor : cursor + chunk_size],
    )


def iter_frames(
    samples: np.ndarray,
    *,
    chunk_size: int = CHUNK_SIZE_SAMPLES,
):
    """Yield every frame of `samples` in cursor order."""
    cursor = 0
    index = 0
    total = int(samples.shape[0])
    while cursor < total:
        frame = take_frame(samples, cursor, chunk_size=chunk_size, index=index)
        yield frame
        cursor = frame.end
        index += 1


def split_samples_into_frames(
    samples: np.ndarray,
    *,
    chunk_size: int = CHUNK_SIZE_SAMPLES,
) -> list[bytes]:
    """
    Split a sample sequence into publishable payloads.

    Returns:
        List of little-endian float32 byte strings, one per frame.
        Each payload is chunk_size * 4 bytes except possibly the last.
    """
    return [frame.pcm_bytes for frame in iter_frames(samples, chunk_size=chunk_size)]


def frame_count(num_samples: int, *, chunk_size: int = CHUNK_SIZE_SAMPLES) -> int:
    """
    Number of frames needed for num_samples (ceiling division).

    Useful for observability and tests.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    if num_samples <= 0:
        return 0
    return -(-num_samples // chunk_size)


def total_payload_bytes(num_samples: int) -> int:
    """Bytes published for a full run over num_samples."""
    return max(num_samples, 0) * SAMPLE_WIDTH_BYTES

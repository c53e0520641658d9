"""
Chunk frame primitives.

Pure data containers only.
No queues, no timing logic.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from spec import SAMPLE_DTYPE, SAMPLE_WIDTH_BYTES


@dataclass(frozen=True)
class ChunkFrame:
    """
    One contiguous slice of a decoded sample sequence, sent as one message.

    index:
        Zero-based position of this frame within its session.

    start:
        Sample offset (cursor) of the first sample in the frame.

    samples:
        float32 view into the session's sample sequence.
        Length is <= chunk size; only the final frame may be shorter.
    """
    index: int
    start: int
    samples: np.ndarray

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def end(self) -> int:
        return self.start + self.sample_count

    @property
    def byte_length(self) -> int:
        return self.sample_count * SAMPLE_WIDTH_BYTES

    @property
    def pcm_bytes(self) -> bytes:
        """Raw little-endian float32 payload. No header, no padding."""
        return self.samples.astype(SAMPLE_DTYPE, copy=False).tobytes()

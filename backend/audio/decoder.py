"""
Sample source decoding.

Turns a stored container file into normalized float32 amplitudes in
[-1.0, 1.0] plus metadata. Blocking; callers on the event loop should run
it via asyncio.to_thread().
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import soundfile as sf

from audio.pcm import first_channel_float32
from playback.errors import DecodeError


@dataclass(frozen=True)
class DecodedSource:
    """
    samples:
        First channel only, float32, contiguous.

    sample_rate:
        Source sample rate in Hz. Published unchanged (no resampling).

    channels:
        Channel count of the container (informational).
    """
    samples: np.ndarray
    sample_rate: int
    channels: int

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.samples.shape[0] / self.sample_rate


def decode_source(path: Path) -> DecodedSource:
    """
    Decode a source file.

    Raises:
        DecodeError if the file cannot be read or decoded.
    """
    try:
        data, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
    except (RuntimeError, OSError, ValueError) as exc:
        # libsndfile errors surface as RuntimeError subclasses
        raise DecodeError(f"cannot decode {path.name}: {exc}") from exc

    if data.shape[1] == 0:
        raise DecodeError(f"cannot decode {path.name}: no channels")

    return DecodedSource(
        samples=first_channel_float32(data),
        sample_rate=int(sample_rate),
        channels=int(data.shape[1]),
    )

"""Sample layout utilities."""
import numpy as np

from spec import PUBLISH_CHANNEL_INDEX


def first_channel_float32(frames: np.ndarray) -> np.ndarray:
    """
    Select the publish channel from a (frames, channels) array as float32.

    Returns a contiguous 1-D array so chunk slices serialize without copies.
    No resampling. No channel mixing.
    """
    if frames.ndim == 1:
        mono = frames
    else:
        mono = frames[:, PUBLISH_CHANNEL_INDEX]
    return np.ascontiguousarray(mono, dtype=np.float32)

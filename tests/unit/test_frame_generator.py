# pylint: disable=missing-module-docstring,missing-function-docstring

import numpy as np
import pytest

from audio.frame_generator import (
    frame_count,
    iter_frames,
    split_samples_into_frames,
    take_frame,
    total_payload_bytes,
)
from spec import CHUNK_MAX_BYTES, CHUNK_SIZE_SAMPLES


def make_samples(n: int) -> np.ndarray:
    return np.linspace(-1.0, 1.0, num=n, dtype=np.float32)


# ---------------------------------------------------------------------
# Frame counts and sizes
# ---------------------------------------------------------------------

@pytest.mark.parametrize("length", [1, 1023, 1024, 1025, 2048, 2500, 44_100])
def test_frame_count_is_ceiling(length: int):
    frames = list(iter_frames(make_samples(length)))

    assert len(frames) == frame_count(length)
    assert len(frames) == -(-length // CHUNK_SIZE_SAMPLES)

    expected_last = length % CHUNK_SIZE_SAMPLES or CHUNK_SIZE_SAMPLES
    assert frames[-1].sample_count == expected_last
    for frame in frames[:-1]:
        assert frame.sample_count == CHUNK_SIZE_SAMPLES


def test_2500_samples_split_as_documented():
    payloads = split_samples_into_frames(make_samples(2500))

    assert [len(p) // 4 for p in payloads] == [1024, 1024, 452]
    assert [len(p) for p in payloads] == [4096, 4096, 1808]
    assert sum(len(p) for p in payloads) == total_payload_bytes(2500) == 10_000


def test_frames_never_exceed_max_bytes():
    for payload in split_samples_into_frames(make_samples(5000)):
        assert len(payload) <= CHUNK_MAX_BYTES


def test_empty_input_returns_no_frames():
    assert split_samples_into_frames(make_samples(0)) == []
    assert frame_count(0) == 0


# ---------------------------------------------------------------------
# Wire encoding
# ---------------------------------------------------------------------

def test_payload_is_little_endian_float32_without_header():
    samples = np.array([0.0, 0.5, -1.0, 1.0], dtype=np.float32)

    (payload,) = split_samples_into_frames(samples)

    assert payload == np.array([0.0, 0.5, -1.0, 1.0], dtype="<f4").tobytes()
    assert payload[4:8] == b"\x00\x00\x00\x3f"  # 0.5 little-endian


def test_frames_are_contiguous_and_ordered():
    samples = make_samples(3000)
    frames = list(iter_frames(samples))

    assert [f.index for f in frames] == [0, 1, 2]
    assert [f.start for f in frames] == [0, 1024, 2048]
    rebuilt = np.concatenate([f.samples for f in frames])
    assert np.array_equal(rebuilt, samples)


# ---------------------------------------------------------------------
# take_frame validation
# ---------------------------------------------------------------------

def test_take_frame_clips_to_sequence_end():
    frame = take_frame(make_samples(1500), 1024)

    assert frame.sample_count == 476
    assert frame.end == 1500
    assert frame.byte_length == 476 * 4


def test_take_frame_rejects_cursor_at_end():
    with pytest.raises(ValueError):
        take_frame(make_samples(10), 10)


def test_take_frame_rejects_non_positive_chunk_size():
    with pytest.raises(ValueError):
        take_frame(make_samples(10), 0, chunk_size=0)

# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from playback.enums.state import StreamState
from playback.errors import DecodeError, TransportError
from playback.oneshot import publish_file


class RecordingChannel:
    def __init__(self, *, fail_send: bool = False) -> None:
        self.fail_send = fail_send
        self.opened = 0
        self.closed = 0
        self.sent: list[bytes] = []

    async def open(self) -> None:
        self.opened += 1

    async def send(self, payload: bytes) -> None:
        if self.fail_send:
            raise TransportError("send failed")
        self.sent.append(payload)

    def close(self) -> None:
        self.closed += 1


def write_wav(path: Path, n: int) -> Path:
    sf.write(str(path), np.full(n, 0.25, dtype=np.float32), 8000, subtype="FLOAT")
    return path


def test_publishes_whole_file_then_closes(tmp_path: Path):
    channel = RecordingChannel()

    session = asyncio.run(
        publish_file(write_wav(tmp_path / "tone.wav", 2500), channel, interval_ms=1)
    )

    assert [len(p) for p in channel.sent] == [4096, 4096, 1808]
    assert np.allclose(np.frombuffer(channel.sent[0], dtype="<f4"), 0.25)
    assert session.bytes_sent == 10000
    assert session.state is StreamState.IDLE
    assert (channel.opened, channel.closed) == (1, 1)


def test_decode_error_never_opens_channel(tmp_path: Path):
    bad = tmp_path / "bad.wav"
    bad.write_bytes(b"junk")
    channel = RecordingChannel()

    with pytest.raises(DecodeError):
        asyncio.run(publish_file(bad, channel))

    assert channel.opened == 0


def test_send_failure_propagates_after_close(tmp_path: Path):
    channel = RecordingChannel(fail_send=True)

    with pytest.raises(TransportError):
        asyncio.run(publish_file(write_wav(tmp_path / "tone.wav", 100), channel))

    assert channel.closed == 1

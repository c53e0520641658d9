"""
Stream one WAV file to the publish endpoint and exit.

The backend modules are imported top-level (`adapters`, `config`, ...), so
either install the project first (`pip install -e .`) or put `backend/` on
the path:

    PYTHONPATH=backend python tools/send_wav.py sample-15s.wav

Usage (after `pip install -e .`):
    python tools/send_wav.py sample-15s.wav
    python tools/send_wav.py sample.wav --address tcp://127.0.0.1:5555 --bind
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv

from adapters.publish.zmq_publisher import ZmqPublishChannel
from config import AppConfig
from playback.errors import PlaybackError
from playback.oneshot import publish_file


def main() -> int:
    load_dotenv()
    config = AppConfig.load_from_env()

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("path", type=Path)
    parser.add_argument("--address", default=config.publish_address)
    parser.add_argument("--bind", action="store_true", default=config.publish_bind)
    args = parser.parse_args()

    channel = ZmqPublishChannel(address=args.address, bind=args.bind)
    try:
        session = asyncio.run(publish_file(args.path, channel))
    except PlaybackError as exc:
        print(f"{exc.code}: {exc}")
        return 1

    print(f"Finished sending {session.frames_sent} frames ({session.bytes_sent} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

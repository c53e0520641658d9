"""
Stored sample sources (uploaded WAV files on local disk).

Source refs are bare file names inside the upload directory; anything that
would escape it is treated as unknown.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path

from playback.errors import SourceNotFound
from spec import SOURCE_EXTENSIONS

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


@dataclass(frozen=True)
class SourceEntry:
    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


def safe_filename(original: str) -> str:
    """Replace every character outside [a-zA-Z0-9_.-] with '_'."""
    return _UNSAFE_CHARS.sub("_", original)


class SourceStore:
    """Directory-backed source listing, lookup and upload."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def list_sources(self) -> list[SourceEntry]:
        """WAV sources, newest first (ids are timestamp-prefixed)."""
        entries = [
            SourceEntry(id=p.name, name=p.name)
            for p in self._root.iterdir()
            if p.is_file() and p.suffix.lower() in SOURCE_EXTENSIONS
        ]
        entries.sort(key=lambda e: e.id, reverse=True)
        return entries

    def resolve(self, source_ref: str) -> Path:
        """
        Map a source ref to its file.

        Raises:
            SourceNotFound if the ref is empty, not a plain file name, or
            does not exist.
        """
        if not source_ref or Path(source_ref).name != source_ref or source_ref in (".", ".."):
            raise SourceNotFound(f"unknown source: {source_ref!r}")
        path = self._root / source_ref
        if not path.is_file():
            raise SourceNotFound(f"unknown source: {source_ref!r}")
        return path

    def save_upload(self, original_name: str, data: bytes) -> SourceEntry:
        """
        Store uploaded bytes as '<epoch_ms>_<sanitized name>'.

        Returns the new entry; `name` keeps the client's original file name.
        """
        stored = f"{time.time_ns() // 1_000_000}_{safe_filename(original_name)}"
        (self._root / stored).write_bytes(data)
        return SourceEntry(id=stored, name=original_name)

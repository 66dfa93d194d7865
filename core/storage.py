"""core/storage.py — Where save blobs live.

Every backend stores exactly one text blob and exposes the same three
calls, so the save manager can try them in preference order:

    read()  -> str | None     None when nothing is stored
    write(text)
    clear()

``FileCache`` is the fast path: one small text file next to the game,
written on the frame thread.  ``SqliteStore`` is the durable copy: a
key/value table written from the save manager's worker thread.
``MemoryBackend`` keeps the blob in a variable for tests.

Read and write failures surface as ``OSError`` / ``sqlite3.Error``; the
save manager decides what to do with them.
"""

from __future__ import annotations
import os
import sqlite3
import threading
from pathlib import Path


class FileCache:
    name = "cache"

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        text = self.path.read_text(encoding="utf-8").strip()
        return text or None

    def write(self, text: str) -> None:
        """Write via a temp file + rename so a crash never leaves half a blob."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SqliteStore:
    """Single-row key/value table.  One connection per call."""

    name = "db"
    KEY = "save"

    def __init__(self, path: Path | str):
        self.path = Path(path)
        # Worker-thread writes and frame-thread reads/clears.
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.execute(
            "CREATE TABLE IF NOT EXISTS saves (key TEXT PRIMARY KEY, blob TEXT NOT NULL)"
        )
        return conn

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        with self._lock:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT blob FROM saves WHERE key = ?", (self.KEY,)
                ).fetchone()
            finally:
                conn.close()
        return row[0] if row else None

    def write(self, text: str) -> None:
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO saves (key, blob) VALUES (?, ?)",
                        (self.KEY, text),
                    )
            finally:
                conn.close()

    def clear(self) -> None:
        if not self.path.exists():
            return
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM saves WHERE key = ?", (self.KEY,))
            finally:
                conn.close()


class MemoryBackend:
    def __init__(self, text: str | None = None, name: str = "memory"):
        self.text = text
        self.name = name
        self.writes = 0

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1

    def clear(self) -> None:
        self.text = None

"""core/save.py — Farm persistence.

A save is a fixed subset of ``GameState`` rendered as JSON, compressed
with zlib and wrapped in base64 so it survives copy/paste and plain
text files:

    blob = base64(zlib(json(snapshot)))

The same blob goes to three places:

- the **fast cache** (first backend) on every save, synchronously;
- the **durable store** (remaining backends) on every save, from a
  single worker thread so the frame loop never waits on disk;
- an **export file** when the player asks for one.

On boot the backends are tried in order.  A blob that fails to decode
is purged from its backend and skipped, so a corrupt cache falls back to
the durable copy and a corrupt everything starts a fresh farm.  Loading
(boot or import) always goes through ``state_from_snapshot``: every cow
gets a new behaviour seed and its offline heart decay applied.

Unknown keys are ignored and missing ones take their defaults, so old
saves keep loading as fields are added.
"""

from __future__ import annotations
import base64
import binascii
import json
import sqlite3
import zlib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from components.cow import Cow
from components.game_state import GameState, default_stats, default_upgrades
from core.rng import random_seed
from core.storage import FileCache, SqliteStore
from core.tuning import get as _tun

SAVE_VERSION = 1
EXPORT_PREFIX = "mooney-farm-"
EXPORT_SUFFIX = ".save"

_STORAGE_ERRORS = (OSError, sqlite3.Error)


class SaveError(Exception):
    """Base class for persistence failures."""


class CorruptSaveError(SaveError):
    """A blob or snapshot could not be decoded into a farm."""


# ═══════════════════════════════════════════════════════════════════
#  Snapshot ↔ blob
# ═══════════════════════════════════════════════════════════════════

def snapshot(state: GameState) -> dict[str, Any]:
    """The persisted subset of *state* as plain JSON data."""
    return {
        "version": SAVE_VERSION,
        "mooney": state.mooney,
        "cows": [c.to_dict() for c in state.cows],
        "last_harvest": state.last_harvest,
        "is_harvest": state.is_harvest,
        "upgrades": dict(state.upgrades),
        "stats": dict(state.stats),
        "volume": state.volume,
        "tutorial": state.tutorial,
        "last_export_reminder": state.last_export_reminder,
        "achievements": dict(state.achievements),
    }


def encode_state(state: GameState) -> str:
    raw = json.dumps(snapshot(state), separators=(",", ":")).encode("utf-8")
    return base64.b64encode(zlib.compress(raw)).decode("ascii")


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} in save")


def decode_blob(text: str) -> dict[str, Any]:
    """Reverse ``encode_state``.  Raises ``CorruptSaveError``."""
    try:
        raw = zlib.decompress(base64.b64decode(text.strip(), validate=True))
        data = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError,
            AttributeError, RecursionError) as ex:
        raise CorruptSaveError(f"unreadable save blob: {ex}") from ex
    if not isinstance(data, dict):
        raise CorruptSaveError("save blob is not an object")
    return data


def _int_map(value, defaults: dict[str, int]) -> dict[str, int]:
    merged = dict(defaults)
    if isinstance(value, dict):
        for key, v in value.items():
            merged[str(key)] = int(v)
    return merged


def _flag_map(value) -> dict[str, bool]:
    if not isinstance(value, dict):
        return {}
    return {str(k): True for k, v in value.items() if v}


def state_from_snapshot(data: dict[str, Any], now: datetime | None = None) -> GameState:
    """Build a fresh ``GameState`` from snapshot data.

    Cows are re-seeded and their offline decay applied.  Raises
    ``CorruptSaveError`` if a field has the wrong shape.
    """
    now = now or datetime.now()
    try:
        cows = [Cow.from_dict(d) for d in data.get("cows") or []]
        last_harvest = data.get("last_harvest")
        state = GameState(
            mooney=max(0, int(data.get("mooney", 0))),
            cows=cows,
            upgrades=_int_map(data.get("upgrades"), default_upgrades()),
            last_harvest=None if last_harvest is None else int(last_harvest),
            is_harvest=bool(data.get("is_harvest", False)),
            stats=_int_map(data.get("stats"), default_stats()),
            volume=min(1.0, max(0.0, float(data.get("volume", 0.5)))),
            tutorial=int(data.get("tutorial", 0)),
            last_export_reminder=int(data.get("last_export_reminder", 0)),
            achievements=_flag_map(data.get("achievements")),
        )
        lost = 0
        for cow in state.cows:
            cow.seed = random_seed()
            lost += cow.apply_decay(now)
    except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as ex:
        raise CorruptSaveError(f"malformed save data: {ex}") from ex

    if lost:
        print(f"[SAVE] offline decay: {lost} heart(s) lost across the herd")
    return state


def apply_snapshot(state: GameState, data: dict[str, Any],
                   now: datetime | None = None) -> None:
    """Replace *state* in place.  *state* is untouched if decoding fails."""
    state.replace_with(state_from_snapshot(data, now))


def export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{EXPORT_PREFIX}{now.strftime('%Y-%m-%dT%H-%M-%S')}{EXPORT_SUFFIX}"


def newest_export(directory: Path | str) -> Path | None:
    """Most recent export in *directory* by file name (timestamps sort)."""
    directory = Path(directory)
    if not directory.is_dir():
        return None
    files = sorted(directory.glob(f"{EXPORT_PREFIX}*{EXPORT_SUFFIX}"))
    return files[-1] if files else None


# ═══════════════════════════════════════════════════════════════════
#  Save manager
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ImportResult:
    ok: bool
    error: str = ""
    cows: int = 0


class SaveManager:
    """Owns the save backends, the autosave timer and the write worker.

    *backends* are in read-preference order.  The first is written on
    the calling thread; the rest are written on a single worker thread,
    in submission order, so the newest snapshot always lands last.
    """

    def __init__(self, backends, *, interval: float | None = None,
                 executor: ThreadPoolExecutor | None = None):
        if not backends:
            raise ValueError("SaveManager needs at least one backend")
        self.backends = list(backends)
        self.interval = float(interval if interval is not None
                              else _tun("persistence", "save_interval", 10.0))
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="save")
        self._pending: list[Future] = []
        self._timer = 0.0
        self.saves = 0

    @property
    def fast(self):
        return self.backends[0]

    @property
    def durable(self) -> list:
        return self.backends[1:]

    # ── Writing ──────────────────────────────────────────────────────

    def save(self, state: GameState) -> None:
        text = encode_state(state)
        self._write(self.fast, text)
        self._pending = [f for f in self._pending if not f.done()]
        for backend in self.durable:
            self._pending.append(self._executor.submit(self._write, backend, text))
        self.saves += 1

    def _write(self, backend, text: str) -> None:
        try:
            backend.write(text)
        except _STORAGE_ERRORS as ex:
            print(f"[SAVE] write to {_name(backend)} failed: {ex}")

    def update(self, dt: float, state: GameState) -> bool:
        """Autosave timer.  True on frames that saved."""
        self._timer += dt
        if self._timer < self.interval:
            return False
        self._timer = 0.0
        self.save(state)
        return True

    def suspend(self, state: GameState) -> None:
        """Window hidden / minimised / closing: save right away."""
        self._timer = 0.0
        self.save(state)

    def flush(self) -> None:
        """Block until every queued durable write has finished."""
        for future in self._pending:
            future.result()
        self._pending.clear()

    def close(self) -> None:
        self.flush()
        self._executor.shutdown(wait=True)

    # ── Reading ──────────────────────────────────────────────────────

    def load(self, state: GameState, now: datetime | None = None) -> bool:
        """Restore the first readable save.  False → *state* reset to defaults."""
        for backend in self.backends:
            try:
                text = backend.read()
            except _STORAGE_ERRORS as ex:
                print(f"[SAVE] read from {_name(backend)} failed: {ex}")
                continue
            if not text:
                continue
            try:
                apply_snapshot(state, decode_blob(text), now)
            except CorruptSaveError as ex:
                print(f"[SAVE] WARNING: {_name(backend)} save is corrupt, purging ({ex})")
                self._clear(backend)
                continue
            print(f"[SAVE] loaded {len(state.cows)} cow(s) from {_name(backend)}")
            return True

        state.replace_with(GameState())
        print("[SAVE] no save found, starting fresh")
        return False

    # ── Export / import ──────────────────────────────────────────────

    def export(self, state: GameState, directory: Path | str | None = None,
               now: datetime | None = None) -> Path:
        """Write the current blob to a timestamped file.  Raises OSError."""
        directory = Path(directory or _tun("persistence", "export_dir", "exports"))
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / export_filename(now)
        path.write_text(encode_state(state), encoding="utf-8")
        print(f"[SAVE] exported to {path}")
        return path

    def import_file(self, state: GameState, path: Path | str,
                    now: datetime | None = None) -> ImportResult:
        """Replace the farm with *path*'s contents, or report why not."""
        try:
            text = Path(path).read_text(encoding="utf-8")
            fresh = state_from_snapshot(decode_blob(text), now)
        except (OSError, UnicodeDecodeError, SaveError) as ex:
            print(f"[SAVE] import of {path} failed: {ex}")
            return ImportResult(ok=False, error=str(ex))

        state.replace_with(fresh)
        self.save(state)
        print(f"[SAVE] imported {len(state.cows)} cow(s) from {path}")
        return ImportResult(ok=True, cows=len(state.cows))

    # ── Reset ────────────────────────────────────────────────────────

    def purge(self, state: GameState) -> None:
        """Wipe every backend and reset *state* to defaults."""
        self.flush()
        for backend in self.backends:
            self._clear(backend)
        state.replace_with(GameState())
        self._timer = 0.0
        print("[SAVE] purged")

    def _clear(self, backend) -> None:
        try:
            backend.clear()
        except _STORAGE_ERRORS as ex:
            print(f"[SAVE] clearing {_name(backend)} failed: {ex}")


def _name(backend) -> str:
    return getattr(backend, "name", type(backend).__name__)


def default_manager(root: Path | str = ".") -> SaveManager:
    """File cache + sqlite store at the paths from tuning."""
    root = Path(root)
    return SaveManager([
        FileCache(root / _tun("persistence", "cache_file", "saves/cache.save")),
        SqliteStore(root / _tun("persistence", "db_file", "saves/farm.db")),
    ])

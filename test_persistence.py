"""test_persistence.py — Save blobs, backends and the save manager.

Covers blob round-trips, forward-compatible decoding, the fast-cache →
durable fallback, purge-on-corruption, offline decay and re-seeding on
load, export file naming, import success and failure, and the sqlite
and file backends against a temporary directory.

Run:  python test_persistence.py
"""
from __future__ import annotations
import sys, traceback, base64, json, zlib, tempfile
from datetime import datetime, timedelta
from pathlib import Path

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from components.cow import stamp
from components.game_state import GameState, default_upgrades
from core.save import (
    SaveManager, CorruptSaveError, decode_blob, encode_state, export_filename,
    newest_export, snapshot, state_from_snapshot,
)
from core.storage import FileCache, MemoryBackend, SqliteStore
from logic.cow_factory import spawn_cow


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f" — {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
        raise AssertionError(f"{label} {detail}".strip())


NOW = datetime(2026, 10, 19, 14, 3, 22)
DAY = timedelta(days=1)


def _sample_state() -> GameState:
    state = GameState(mooney=1234, volume=0.25, tutorial=3,
                      last_harvest=1_700_000_000_000, last_export_reminder=42)
    for seed in (42, 43, 44):
        state.cows.append(spawn_cow(state.cows, seed=seed, now=NOW))
    state.cows[0].level, state.cows[0].xp = 4, 77
    state.cows[1].hearts = 6
    state.upgrades["farm_level"] = 3
    state.stats["clicks"] = 99
    state.achievements["First Click"] = True
    return state


def _blob(data) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.b64encode(zlib.compress(raw)).decode("ascii")


def _manager(*backends) -> SaveManager:
    return SaveManager(list(backends), interval=10.0)


def _same_farm(a: GameState, b: GameState) -> bool:
    return (a.mooney == b.mooney
            and [c.id for c in a.cows] == [c.id for c in b.cows]
            and [(c.level, c.xp) for c in a.cows] == [(c.level, c.xp) for c in b.cows])


# ═══════════════════════════════════════════════════════════════════════
#  1. Blob format
# ═══════════════════════════════════════════════════════════════════════

def test_blob_round_trip():
    print("\n── Blob round-trip ──")
    state = _sample_state()
    blob = encode_state(state)
    check(isinstance(blob, str) and blob.isascii(), "blob is ASCII text")
    data = decode_blob(blob)
    check(data == json.loads(json.dumps(snapshot(state))), "decode reverses encode")
    check(set(data) == {"version", "mooney", "cows", "last_harvest", "is_harvest",
                        "upgrades", "stats", "volume", "tutorial",
                        "last_export_reminder", "achievements"},
          "only the fixed key subset is written", str(sorted(data)))
    check(decode_blob("\n" + blob + "\n") == data, "surrounding whitespace is ignored")


def test_corrupt_blobs():
    print("\n── Corrupt blobs ──")
    bad = {
        "not base64": "this is not a save!!",
        "not zlib": base64.b64encode(b"hello").decode("ascii"),
        "not json": base64.b64encode(zlib.compress(b"{oops")).decode("ascii"),
        "not an object": _blob([1, 2, 3]),
        "empty": "",
    }
    for label, text in bad.items():
        try:
            decode_blob(text)
        except CorruptSaveError:
            ok(f"{label} → CorruptSaveError")
        else:
            fail(f"{label} → CorruptSaveError")
            raise AssertionError(label)

    try:
        state_from_snapshot({"cows": [{"name": "no id"}]}, NOW)
    except CorruptSaveError:
        ok("a cow without an id is rejected")
    else:
        fail("a cow without an id is rejected")
        raise AssertionError("cow without id")


def test_forward_compatible():
    print("\n── Missing / unknown keys ──")
    state = state_from_snapshot({"mooney": 5, "from_the_future": {"x": 1},
                                 "upgrades": {"click_level": 3}}, NOW)
    check(state.mooney == 5 and state.cows == [], "present keys load")
    expected = default_upgrades()
    expected["click_level"] = 3
    check(state.upgrades == expected, "missing upgrade levels default to 1")
    check(state.volume == 0.5 and state.tutorial == 0 and state.last_harvest is None,
          "missing settings default")
    check(state.stats["clicks"] == 0, "missing stats default to 0")


def test_load_reseeds_and_decays():
    print("\n── Load re-seeds and decays ──")
    state = _sample_state()
    cow = state.cows[1]
    cow.hearts = 5
    cow.last_pet = stamp(NOW - 4 * DAY)
    cow.last_decay_check = stamp(NOW - 4 * DAY)
    seeds = [c.seed for c in state.cows]

    loaded = state_from_snapshot(decode_blob(encode_state(state)), NOW)
    check(loaded.cows[1].hearts == 2, "offline decay applied on load",
          f"hearts={loaded.cows[1].hearts}")
    check(loaded.cows[1].last_decay_check == stamp(NOW), "decay check stamped")
    check(all(a != b for a, b in zip(seeds, (c.seed for c in loaded.cows))),
          "every cow gets a fresh seed")
    check([c.sprite for c in loaded.cows] == [c.sprite for c in state.cows],
          "appearance survives the re-seed")


# ═══════════════════════════════════════════════════════════════════════
#  2. Save manager
# ═══════════════════════════════════════════════════════════════════════

def test_save_and_load():
    print("\n── Save → load ──")
    cache, db = MemoryBackend(name="cache"), MemoryBackend(name="db")
    mgr = _manager(cache, db)
    try:
        state = _sample_state()
        mgr.save(state)
        mgr.flush()
        check(cache.text is not None and cache.text == db.text,
              "both backends hold the same blob")

        fresh = GameState()
        check(mgr.load(fresh, NOW), "load reports success")
        check(_same_farm(fresh, state), "mooney, ids, levels and xp survive")
        check(fresh.upgrades["farm_level"] == 3 and fresh.volume == 0.25,
              "upgrades and settings survive")
    finally:
        mgr.close()


def test_cache_preferred():
    print("\n── Fast cache first ──")
    cache = MemoryBackend(encode_state(GameState(mooney=1)), name="cache")
    db = MemoryBackend(encode_state(GameState(mooney=2)), name="db")
    mgr = _manager(cache, db)
    try:
        state = GameState()
        mgr.load(state, NOW)
        check(state.mooney == 1, "the fast cache wins when both are readable")

        cache.text = None
        mgr.load(state, NOW)
        check(state.mooney == 2, "falls back to the durable store")
    finally:
        mgr.close()


def test_corrupt_save_recovery():
    print("\n── Corrupt save recovery ──")
    cache = MemoryBackend("garbage%%%", name="cache")
    db = MemoryBackend(None, name="db")
    mgr = _manager(cache, db)
    try:
        state = _sample_state()
        loaded = mgr.load(state, NOW)
        check(not loaded, "load reports no save")
        check(state.mooney == 0 and state.cows == [], "state reset to defaults")
        check(cache.text is None, "the corrupt blob was purged")

        cache.text = "garbage%%%"
        db.text = encode_state(GameState(mooney=77))
        check(mgr.load(state, NOW) and state.mooney == 77,
              "a corrupt cache falls back to a good durable copy")
        check(cache.text is None, "and the cache is still purged")
    finally:
        mgr.close()


def _raw_blob(text: str) -> str:
    return base64.b64encode(zlib.compress(text.encode("utf-8"))).decode("ascii")


def test_unusual_blobs():
    print("\n── Unusual blobs ──")
    cow = spawn_cow(seed=5, now=NOW).to_dict()
    cow["hearts"] = 10
    cow["last_pet"] = (NOW - 10 * DAY).strftime("%Y-%m-%dT%H:%M:%S") + "+00:00"
    cow["last_decay_check"] = cow["last_pet"]
    cache = MemoryBackend(_blob({"mooney": 3, "cows": [cow]}), name="cache")
    mgr = _manager(cache)
    try:
        state = GameState()
        check(mgr.load(state, NOW) and state.mooney == 3,
              "stamps with a UTC offset still load")
        loaded = state.cows[0]
        check(1 <= loaded.hearts <= 2, "offset stamps count as local time for decay",
              f"hearts={loaded.hearts}")
        check("+" not in loaded.last_decay_check, "decay check is stored as local time",
              loaded.last_decay_check)

        for label, text in (
            ("Infinity", _blob({"mooney": float("inf")})),
            ("NaN", _blob({"volume": float("nan")})),
            ("overflowing number", _raw_blob('{"mooney": 1e400}')),
            ("deep nesting", _raw_blob("[" * 100_000)),
        ):
            cache.text = text
            state = GameState(mooney=9)
            check(not mgr.load(state, NOW) and state.mooney == 0,
                  f"{label}: load starts fresh")
            check(cache.text is None, f"{label}: blob purged")

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "odd.save"
            path.write_text(_raw_blob('{"mooney": 1e400}'), encoding="utf-8")
            state = GameState(mooney=9)
            result = mgr.import_file(state, path, NOW)
            check(not result.ok and result.error, "overflowing import reports failure")
            check(state.mooney == 9, "and leaves the farm untouched")

            path.write_text(_blob({"mooney": 4, "cows": [cow]}), encoding="utf-8")
            result = mgr.import_file(state, path, NOW)
            check(result.ok and state.mooney == 4, "offset stamps import cleanly", str(result))
    finally:
        mgr.close()


def test_write_failures():
    print("\n── Storage failures ──")

    class Broken(MemoryBackend):
        def write(self, text):
            raise OSError("disk full")

        def read(self):
            raise OSError("unreadable")

    good = MemoryBackend(name="db")
    mgr = _manager(Broken(name="cache"), good)
    try:
        state = _sample_state()
        mgr.save(state)
        mgr.flush()
        ok("a failing backend does not raise")
        check(good.text == encode_state(state), "the other backend is still written")
        fresh = GameState()
        check(mgr.load(fresh, NOW) and fresh.mooney == state.mooney,
              "an unreadable cache falls through to the durable store")
    finally:
        mgr.close()


def test_autosave_timer():
    print("\n── Autosave timer ──")
    cache, db = MemoryBackend(name="cache"), MemoryBackend(name="db")
    mgr = _manager(cache, db)
    try:
        state = GameState(mooney=3)
        check(not mgr.update(4.0, state) and not mgr.update(5.9, state),
              "no save before the interval")
        check(mgr.update(0.2, state) and cache.writes == 1, "saves once the interval passes")
        check(not mgr.update(1.0, state), "timer restarts after a save")
        mgr.suspend(state)
        mgr.flush()
        check(cache.writes == 2 and db.writes == 2, "suspend saves immediately")
    finally:
        mgr.close()


def test_purge():
    print("\n── Purge ──")
    cache, db = MemoryBackend(name="cache"), MemoryBackend(name="db")
    mgr = _manager(cache, db)
    try:
        state = _sample_state()
        mgr.save(state)
        mgr.purge(state)
        check(cache.text is None and db.text is None, "both backends cleared")
        check(state.mooney == 0 and state.cows == [], "state reset")
        check(not mgr.load(GameState(), NOW), "nothing left to load")
    finally:
        mgr.close()


# ═══════════════════════════════════════════════════════════════════════
#  3. Export / import
# ═══════════════════════════════════════════════════════════════════════

def test_export_import():
    print("\n── Export → import ──")
    check(export_filename(NOW) == "mooney-farm-2026-10-19T14-03-22.save",
          "export name is a filesystem-safe timestamp", export_filename(NOW))
    cache, db = MemoryBackend(name="cache"), MemoryBackend(name="db")
    mgr = _manager(cache, db)
    with tempfile.TemporaryDirectory() as tmp:
        try:
            state = _sample_state()
            path = mgr.export(state, tmp, NOW)
            check(path.name == export_filename(NOW) and path.exists(), "export file written")
            later = mgr.export(state, tmp, NOW + timedelta(seconds=5))
            check(newest_export(tmp) == later, "newest export is found by name")

            other = GameState(mooney=5)
            result = mgr.import_file(other, path, NOW)
            check(result.ok and result.cows == 3, "import succeeds", str(result))
            check(_same_farm(other, state), "import(export()) reproduces the farm")
            check(other.achievements == {"First Click": True}, "achievements survive export")
            check(cache.writes >= 1, "import saves the new farm")

            junk = Path(tmp) / "junk.save"
            junk.write_text("definitely not a farm", encoding="utf-8")
            before = other.cows
            result = mgr.import_file(other, junk, NOW)
            check(not result.ok and result.error, "garbage import fails with a reason")
            check(other.cows is before and other.mooney == state.mooney,
                  "failed import leaves the farm untouched")

            missing = mgr.import_file(other, Path(tmp) / "nope.save", NOW)
            check(not missing.ok, "missing file fails cleanly")
        finally:
            mgr.close()


# ═══════════════════════════════════════════════════════════════════════
#  4. Backends
# ═══════════════════════════════════════════════════════════════════════

def test_backends():
    print("\n── File and sqlite backends ──")
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        for backend in (FileCache(root / "saves" / "cache.save"),
                        SqliteStore(root / "saves" / "farm.db")):
            label = type(backend).__name__
            check(backend.read() is None, f"{label}: empty at first")
            backend.write("abc")
            backend.write("def")
            check(backend.read() == "def", f"{label}: last write wins")
            backend.clear()
            check(backend.read() is None, f"{label}: clear removes the blob")

        mgr = SaveManager([FileCache(root / "c.save"), SqliteStore(root / "f.db")])
        try:
            state = _sample_state()
            mgr.save(state)
            mgr.flush()
            (root / "c.save").unlink()
            fresh = GameState()
            check(mgr.load(fresh, NOW) and _same_farm(fresh, state),
                  "sqlite copy restores the farm when the cache is gone")
        finally:
            mgr.close()


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Blob round-trip", test_blob_round_trip),
        ("Corrupt blobs", test_corrupt_blobs),
        ("Missing / unknown keys", test_forward_compatible),
        ("Load re-seeds and decays", test_load_reseeds_and_decays),
        ("Save → load", test_save_and_load),
        ("Fast cache first", test_cache_preferred),
        ("Corrupt save recovery", test_corrupt_save_recovery),
        ("Unusual blobs", test_unusual_blobs),
        ("Storage failures", test_write_failures),
        ("Autosave timer", test_autosave_timer),
        ("Purge", test_purge),
        ("Export → import", test_export_import),
        ("File and sqlite backends", test_backends),
    ]

    for name, fn in sections:
        try:
            fn()
        except AssertionError:
            pass
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name} — unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Persistence Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)

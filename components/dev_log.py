"""components.dev_log — Structured per-cow event log.

A ring-buffer resource that records timestamped behaviour transitions,
meals, level-ups and pets.  Read by the farm scene's debug overlay
(F1): the selected cow's history, or the whole herd's when nothing
is selected.

Usage:
    log = DevLog()
    log.record(cow.id, "anim", "idle → idleToWalk", name=cow.name)

Each entry is a dict:
    {"t": float, "cow": str, "name": str, "cat": str,
     "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Ring-buffer of cow / system events for the debug overlay."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 500

    def record(self, cow_id: str, cat: str, msg: str, *,
               name: str = "", t: float = 0.0,
               details: dict | None = None) -> None:
        self.entries.append({
            "t": t,
            "cow": cow_id,
            "name": name,
            "cat": cat,
            "msg": msg,
            "details": details,
        })
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_cow(self, cow_id: str, n: int = 30) -> list[dict]:
        return [e for e in self.entries if e["cow"] == cow_id][-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        return [e for e in self.entries if e["cat"] == cat][-n:]

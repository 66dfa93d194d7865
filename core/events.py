"""core/events.py — Lightweight event bus.

Decouples systems that *signal* something (a cow finished eating, a
harvest window closed) from systems that *react* to it (floating
mooney text, statistics, sounds).  The bus is created at boot and
passed to whoever emits::

    bus.emit(CowAte(cow_id=cow.id, mooney=5))

Consumers subscribe with a callable::

    bus.subscribe("CowAte", my_handler)

And the scene drains once per frame::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those run in the same drain.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
from collections import defaultdict
import traceback


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class CowAte:
    """A cow finished a meal and produced mooney."""
    cow_id: str
    mooney: int = 0
    boosted: bool = False


@dataclass
class CowLevelledUp:
    cow_id: str
    level: int = 1


@dataclass
class CowPetted:
    """A pet request was accepted (``gained`` is 0 on a repeat day)."""
    cow_id: str
    hearts: int = 0
    gained: int = 0


@dataclass
class CowBought:
    cow_id: str
    price: int = 0


@dataclass
class CowSold:
    cow_id: str
    price: int = 0


@dataclass
class UpgradeBought:
    key: str
    level: int = 1
    price: int = 0


@dataclass
class HarvestStarted:
    duration_ms: int = 0
    multiplier: float = 1.0


@dataclass
class HarvestEnded:
    pass


@dataclass
class AchievementUnlocked:
    label: str


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"CowAte"``.
        """
        self._subs[event_type].append(handler)

    def pending(self) -> list[Any]:
        """Snapshot of queued events (tests and debug overlay)."""
        return list(self._queue)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                for handler in self._subs.get(name, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

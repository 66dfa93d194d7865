"""logic/herd.py — Runs the behaviour engine for every cow on the farm.

The herd owns one ``CowBehavior`` per cow id.  It never owns cows; the
``GameState`` does.  ``sync`` is called whenever the cow list may have
changed (buy, sell, import) so removed cows lose their record, and with
it any animation or pet latch still running.

    herd = Herd(PlayArea(w, h), bus, log)
    herd.sync(state.cows)
    herd.tick(state, dt, now_ms())
    for view in herd.views(): ...
"""

from __future__ import annotations
from datetime import datetime

from components.behavior import CowBehavior, CowView
from components.dev_log import DevLog
from components.game_state import GameState
from core.events import EventBus, CowAte, CowLevelledUp, CowPetted
from logic.behavior import new_behavior, request_pet, tick_behavior
from logic.farm import active_multiplier, add_mooney, update_harvest
from logic.play_area import PlayArea


class Herd:
    def __init__(self, area: PlayArea, bus: EventBus | None = None,
                 log: DevLog | None = None):
        self.area = area
        self.bus = bus
        self.log = log
        self.behaviors: dict[str, CowBehavior] = {}
        self.time = 0.0

    # ── Membership ───────────────────────────────────────────────────

    def sync(self, cows) -> None:
        """Match behaviour records to *cows*: add new ids, drop gone ones."""
        live = {c.id for c in cows}
        for cow_id in list(self.behaviors):
            if cow_id not in live:
                del self.behaviors[cow_id]
        for cow in cows:
            if cow.id not in self.behaviors:
                self.behaviors[cow.id] = new_behavior(cow, self.area)

    def behavior(self, cow_id: str) -> CowBehavior | None:
        return self.behaviors.get(cow_id)

    # ── Frame ────────────────────────────────────────────────────────

    def tick(self, state: GameState, dt: float, now: int) -> int:
        """Advance every cow one frame.  Returns mooney produced."""
        self.time += dt
        update_harvest(state, now, self.bus)
        multiplier = active_multiplier(state)
        boosted = multiplier != 1.0

        total = 0
        for cow in state.cows:
            b = self.behaviors.get(cow.id)
            if b is None:
                b = self.behaviors[cow.id] = new_behavior(cow, self.area)
            anim, level = b.anim, cow.level

            gained = tick_behavior(b, cow, dt, self.area, multiplier)

            if b.anim != anim:
                self._log(cow, "anim", f"{anim} → {b.anim}")
            if gained:
                total += gained
                add_mooney(state, gained)
                self._log(cow, "eat", f"+{gained} mooney",
                          details={"multiplier": multiplier})
                if self.bus:
                    self.bus.emit(CowAte(cow_id=cow.id, mooney=gained,
                                         boosted=boosted))
            if cow.level != level:
                self._log(cow, "level", f"level {level} → {cow.level}")
                if self.bus:
                    self.bus.emit(CowLevelledUp(cow_id=cow.id, level=cow.level))
        return total

    # ── Requests ─────────────────────────────────────────────────────

    def pet(self, state: GameState, cow_id: str,
            now: datetime | None = None) -> int | None:
        """Pet a cow.  Hearts gained, or None if refused / unknown."""
        cow = state.cow(cow_id)
        b = self.behaviors.get(cow_id)
        if cow is None or b is None:
            return None
        gained = request_pet(b, cow, now)
        if gained is None:
            return None
        state.bump("times_petted")
        self._log(cow, "pet", f"hearts {cow.hearts} (+{gained})")
        if self.bus:
            self.bus.emit(CowPetted(cow_id=cow.id, hearts=cow.hearts,
                                    gained=gained))
        return gained

    # ── Output ───────────────────────────────────────────────────────

    def views(self) -> list[CowView]:
        scale = self.area.scale
        return [CowView(id=b.cow_id, x=b.x, y=b.y, scale=scale,
                        facing=b.facing, anim=b.anim)
                for b in self.behaviors.values()]

    def hit_test(self, x: float, y: float) -> str | None:
        """Id of the front-most cow under the point, if any."""
        half = self.area.half_size
        for b in sorted(self.behaviors.values(), key=lambda b: -b.y):
            if abs(b.x - x) <= half and abs(b.y - y) <= half:
                return b.cow_id
        return None

    def resize(self, width: float, height: float) -> None:
        self.area = PlayArea(width, height)
        for b in self.behaviors.values():
            b.x, b.y = self.area.clamp(b.x, b.y)

    def _log(self, cow, cat: str, msg: str, details: dict | None = None) -> None:
        if self.log is not None:
            self.log.record(cow.id, cat, msg, name=cow.name, t=self.time,
                            details=details)

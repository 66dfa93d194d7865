"""components.cow — The cow entity and its persistent sub-records.

A cow is created once by ``logic.cow_factory`` and afterwards only
changes through the methods below (feeding, petting, decay, renaming).
Everything here round-trips through ``to_dict`` / ``from_dict`` for
the save file; unknown keys are ignored and missing ones default.

Timestamps (``last_pet``, ``last_decay_check``) are naive local-time
ISO-8601 strings because petting is rate-limited by *calendar date*.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta

from data.cow_data import BASELINE_STATS, MAX_HEARTS, MAX_LEVEL, XP_PER_LEVEL
from core.tuning import get as _tun

_DAY = timedelta(days=1)


def stamp(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def parse_stamp(value: str | None, fallback: datetime) -> datetime:
    """Parse a stored timestamp; unreadable values become *fallback*.

    Stamps carrying a UTC offset are converted to naive local time.
    """
    if not value:
        return fallback
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return fallback
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def whole_days(since: datetime, now: datetime) -> int:
    """Full 24 h periods between *since* and *now* (never negative)."""
    return max(0, (now - since) // _DAY)


@dataclass
class LayerFilter:
    """Colour-matrix settings applied to one sprite layer."""
    hue: float = 0.0
    saturate: float = 0.0
    contrast: float = 0.0
    brightness: float = 1.0

    @classmethod
    def from_dict(cls, d: dict) -> LayerFilter:
        return cls(
            hue=float(d.get("hue", 0.0)),
            saturate=float(d.get("saturate", 0.0)),
            contrast=float(d.get("contrast", 0.0)),
            brightness=float(d.get("brightness", 1.0)),
        )


@dataclass
class SpriteInfo:
    """Ordered layer names (bottom first) plus optional per-layer filters."""
    layers: list[str] = field(default_factory=list)
    filters: dict[str, LayerFilter] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "layers": list(self.layers),
            "filters": {k: asdict(f) for k, f in self.filters.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> SpriteInfo:
        filters = d.get("filters") or {}
        return cls(
            layers=[str(x) for x in d.get("layers") or []],
            filters={str(k): LayerFilter.from_dict(v)
                     for k, v in filters.items() if isinstance(v, dict)},
        )


@dataclass
class CowStats:
    rarity: str = BASELINE_STATS["rarity"]
    eat_chance: float = BASELINE_STATS["eat_chance"]
    extra_mooney: int = BASELINE_STATS["extra_mooney"]
    value_multiplier: float = BASELINE_STATS["value_multiplier"]

    @classmethod
    def from_dict(cls, d: dict) -> CowStats:
        return cls(
            rarity=str(d.get("rarity", BASELINE_STATS["rarity"])),
            eat_chance=float(d.get("eat_chance", BASELINE_STATS["eat_chance"])),
            extra_mooney=int(d.get("extra_mooney", BASELINE_STATS["extra_mooney"])),
            value_multiplier=float(d.get("value_multiplier",
                                         BASELINE_STATS["value_multiplier"])),
        )


@dataclass
class Cow:
    id: str
    seed: int
    sprite: SpriteInfo = field(default_factory=SpriteInfo)
    name: str = "Cow"
    stats: CowStats = field(default_factory=CowStats)
    level: int = 1
    xp: int = 0
    hearts: int = 0
    pitch: float = 1.0
    last_pet: str = ""
    last_decay_check: str = ""

    # ── Progression ──────────────────────────────────────────────────

    @property
    def xp_to_level(self) -> int | None:
        """XP needed to leave the current level, None at the cap."""
        if self.level >= MAX_LEVEL:
            return None
        return XP_PER_LEVEL.get(self.level)

    def eat(self, harvest_multiplier: float = 1.0) -> int:
        """Finish one meal.  Returns the mooney it produced.

        Payout is ``level + hearts + extra_mooney`` scaled by the harvest
        multiplier.  The same amount is credited as xp, carrying any
        excess into the following levels.
        """
        gained = self.level + self.hearts + self.stats.extra_mooney
        if harvest_multiplier != 1.0:
            gained = int(round(gained * harvest_multiplier))

        if self.xp_to_level is None:
            return gained

        self.xp += gained
        while True:
            threshold = self.xp_to_level
            if threshold is None or self.xp < threshold:
                break
            self.xp -= threshold
            self.level += 1
        return gained

    def sell_value(self) -> int:
        base = XP_PER_LEVEL.get(self.level - 1, 0)
        affection = 1 + self.hearts / MAX_HEARTS
        if self.level >= MAX_LEVEL:
            return int(round(base * self.stats.value_multiplier * affection))
        return int(round((base + self.xp) * self.stats.value_multiplier * affection))

    # ── Affection ────────────────────────────────────────────────────

    def pet(self, now: datetime | None = None) -> int:
        """Pet once.  Hearts rise by one per calendar day at most."""
        now = now or datetime.now()
        last = parse_stamp(self.last_pet, now - _DAY)
        if last.date() == now.date():
            return self.hearts
        if self.hearts < MAX_HEARTS:
            self.hearts += 1
        self.last_pet = stamp(now)
        return self.hearts

    def can_be_petted(self, now: datetime | None = None) -> bool:
        now = now or datetime.now()
        return parse_stamp(self.last_pet, now - _DAY).date() != now.date()

    def apply_decay(self, now: datetime | None = None) -> int:
        """Remove hearts for days of neglect.  Returns hearts lost.

        The first day without petting is free.  The loss is capped by the
        whole days since the previous check, and the check advances only
        by those whole days so a partial day carries over to the next load.
        """
        now = now or datetime.now()
        last_pet = min(parse_stamp(self.last_pet, now), now)
        last_check = min(parse_stamp(self.last_decay_check, last_pet), now)

        elapsed = whole_days(last_check, now)
        decay = min(max(0, whole_days(last_pet, now) - 1), elapsed)
        before = self.hearts
        self.hearts = max(0, self.hearts - decay)
        self.last_decay_check = stamp(last_check + elapsed * _DAY)
        return before - self.hearts

    # ── Identity ─────────────────────────────────────────────────────

    def rename(self, name: str) -> None:
        cleaned = " ".join(str(name).split())
        if not cleaned:
            raise ValueError("cow name cannot be empty")
        max_len = int(_tun("cow", "name_max_length", 16))
        if len(cleaned) > max_len:
            raise ValueError(f"cow name longer than {max_len} characters")
        self.name = cleaned

    # ── Persistence ──────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seed": self.seed,
            "sprite": self.sprite.to_dict(),
            "name": self.name,
            "stats": asdict(self.stats),
            "level": self.level,
            "xp": self.xp,
            "hearts": self.hearts,
            "pitch": self.pitch,
            "last_pet": self.last_pet,
            "last_decay_check": self.last_decay_check,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Cow:
        level = min(MAX_LEVEL, max(1, int(d.get("level", 1))))
        return cls(
            id=str(d["id"]),
            seed=int(d.get("seed", 0)),
            sprite=SpriteInfo.from_dict(d.get("sprite") or {}),
            name=str(d.get("name", "Cow")),
            stats=CowStats.from_dict(d.get("stats") or {}),
            level=level,
            xp=max(0, int(d.get("xp", 0))),
            hearts=min(MAX_HEARTS, max(0, int(d.get("hearts", 0)))),
            pitch=float(d.get("pitch", 1.0)),
            last_pet=str(d.get("last_pet", "")),
            last_decay_check=str(d.get("last_decay_check", "")),
        )

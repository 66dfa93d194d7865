"""components.game_state — The farm aggregate.

One ``GameState`` is created at boot and handed to every system that
needs it (scene, herd, save manager, shop operations).  Nothing reads
it through a global.  Import replaces its contents in place via
``replace_with`` so every holder sees the new farm.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from components.cow import Cow
from data.cow_data import STAT_KEYS, UPGRADE_KEYS


def default_upgrades() -> dict[str, int]:
    return {key: 1 for key in UPGRADE_KEYS}


def default_stats() -> dict[str, int]:
    return {key: 0 for key in STAT_KEYS}


@dataclass
class GameState:
    mooney: int = 0
    cows: list[Cow] = field(default_factory=list)
    upgrades: dict[str, int] = field(default_factory=default_upgrades)
    last_harvest: int | None = None     # epoch ms of the last boost start
    is_harvest: bool = False
    stats: dict[str, int] = field(default_factory=default_stats)
    volume: float = 0.5
    tutorial: int = 0
    last_export_reminder: int = 0       # epoch ms
    achievements: dict[str, bool] = field(default_factory=dict)

    def cow(self, cow_id: str) -> Cow | None:
        for c in self.cows:
            if c.id == cow_id:
                return c
        return None

    def bump(self, stat: str, amount: int = 1) -> None:
        self.stats[stat] = self.stats.get(stat, 0) + amount

    def replace_with(self, other: GameState) -> None:
        """Overwrite every field with *other*'s (import / purge)."""
        self.mooney = other.mooney
        self.cows = other.cows
        self.upgrades = other.upgrades
        self.last_harvest = other.last_harvest
        self.is_harvest = other.is_harvest
        self.stats = other.stats
        self.volume = other.volume
        self.tutorial = other.tutorial
        self.last_export_reminder = other.last_export_reminder
        self.achievements = other.achievements

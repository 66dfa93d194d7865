"""logic/achievements.py — Stat-driven achievements.

Each entry in ``ACHIEVEMENTS`` watches one counter in ``state.stats``.
The first time the counter reaches its target the label is stored in
``state.achievements`` and stays there, even if the table's target is
later raised.  The scene calls ``check`` once per frame.
"""

from __future__ import annotations

from components.game_state import GameState
from core.events import EventBus, AchievementUnlocked
from data.cow_data import ACHIEVEMENTS


def is_unlocked(state: GameState, label: str) -> bool:
    return bool(state.achievements.get(label))


def progress(state: GameState, entry: dict) -> tuple[int, int]:
    """(current, target) with current capped at the target."""
    target = int(entry["target"])
    return min(state.stats.get(entry["stat"], 0), target), target


def check(state: GameState, bus: EventBus | None = None) -> list[str]:
    """Unlock every achievement whose stat has reached its target.

    Returns the labels unlocked by this call (empty most frames).
    """
    unlocked = []
    for entry in ACHIEVEMENTS:
        label = entry["label"]
        if is_unlocked(state, label):
            continue
        current, target = progress(state, entry)
        if current < target:
            continue
        state.achievements[label] = True
        unlocked.append(label)
        print(f"[FARM] achievement unlocked: {label}")
        if bus:
            bus.emit(AchievementUnlocked(label=label))
    return unlocked


def summary(state: GameState) -> list[tuple[str, int, int, bool]]:
    """(label, current, target, unlocked) rows in table order."""
    rows = []
    for entry in ACHIEVEMENTS:
        current, target = progress(state, entry)
        rows.append((entry["label"], current, target, is_unlocked(state, entry["label"])))
    return rows

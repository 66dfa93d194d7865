"""logic/farm.py — Shop, herd and harvest operations on the game state.

Every function takes the ``GameState`` explicitly and reports refusal
through its return value (``None`` / ``False``); nothing here raises for
"not enough mooney" or "farm is full".  Events are emitted on *bus*
when one is given so the front-end can react.

Harvest boost
-------------
Starting a harvest opens a time-limited window during which every meal
pays ``harvest_multiplier`` times as much.  Cooldown, duration and
multiplier all improve with their upgrade levels.  Times are epoch ms.
"""

from __future__ import annotations
import time
from datetime import datetime

from components.cow import Cow
from components.game_state import GameState
from core.events import (
    EventBus, CowBought, CowSold, UpgradeBought, HarvestStarted, HarvestEnded,
)
from core.tuning import get as _tun
from data.cow_data import COW_PRICES, UPGRADE_PRICES
from logic.cow_factory import spawn_cow

_DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


# ── Mooney ───────────────────────────────────────────────────────────

def add_mooney(state: GameState, amount: int) -> None:
    if amount <= 0:
        return
    state.mooney += amount
    state.bump("mooney_earned", amount)


def spend_mooney(state: GameState, amount: int) -> bool:
    if amount < 0 or state.mooney < amount:
        return False
    state.mooney -= amount
    return True


def click(state: GameState) -> int:
    """A click on the pasture pays the click upgrade level."""
    gained = state.upgrades.get("click_level", 1)
    state.bump("clicks")
    add_mooney(state, gained)
    return gained


# ── Cows ─────────────────────────────────────────────────────────────

def farm_capacity(state: GameState) -> int:
    return state.upgrades.get("farm_level", 1) * 2


def cow_price(state: GameState) -> int | None:
    """Price of the next cow, or None when the farm is full / sold out."""
    if len(state.cows) >= farm_capacity(state):
        return None
    return COW_PRICES.get(len(state.cows) + 1)


def buy_cow(state: GameState, bus: EventBus | None = None, *,
            now: datetime | None = None, seed: int | None = None) -> Cow | None:
    price = cow_price(state)
    if price is None or not spend_mooney(state, price):
        return None
    cow = spawn_cow(state.cows, seed=seed, now=now)
    state.cows.append(cow)
    state.bump("cows_bought")
    print(f"[FARM] bought {cow.name} ({cow.stats.rarity}) for {price}")
    if bus:
        bus.emit(CowBought(cow_id=cow.id, price=price))
    return cow


def sell_cow(state: GameState, cow_id: str, bus: EventBus | None = None) -> int | None:
    """Sell a cow.  Returns the price paid, None if no such cow."""
    cow = state.cow(cow_id)
    if cow is None:
        return None
    price = cow.sell_value()
    state.cows = [c for c in state.cows if c.id != cow_id]
    state.mooney += price
    state.bump("cows_sold")
    print(f"[FARM] sold {cow.name} for {price}")
    if bus:
        bus.emit(CowSold(cow_id=cow_id, price=price))
    return price


def rename_cow(state: GameState, cow_id: str, name: str) -> bool:
    cow = state.cow(cow_id)
    if cow is None:
        return False
    try:
        cow.rename(name)
    except ValueError as ex:
        print(f"[FARM] rename refused: {ex}")
        return False
    state.bump("cows_renamed")
    return True


# ── Upgrades ─────────────────────────────────────────────────────────

def upgrade_price(state: GameState, key: str) -> int | None:
    prices = UPGRADE_PRICES.get(key)
    if prices is None:
        return None
    return prices.get(state.upgrades.get(key, 1) + 1)


def purchase_upgrade(state: GameState, key: str, bus: EventBus | None = None) -> bool:
    price = upgrade_price(state, key)
    if price is None or not spend_mooney(state, price):
        return False
    state.upgrades[key] = state.upgrades.get(key, 1) + 1
    state.bump("upgrades_bought")
    print(f"[FARM] {key} → {state.upgrades[key]} for {price}")
    if bus:
        bus.emit(UpgradeBought(key=key, level=state.upgrades[key], price=price))
    return True


# ── Harvest boost ────────────────────────────────────────────────────

def harvest_cooldown_ms(state: GameState) -> int:
    level = state.upgrades.get("harvest_cooldown_level", 1)
    minutes = (_tun("harvest", "cooldown_minutes", 10.0)
               - (level - 1) * _tun("harvest", "cooldown_decrease_per_level", 1.0))
    return int(max(0.0, minutes) * 60_000)


def harvest_duration_ms(state: GameState) -> int:
    level = state.upgrades.get("harvest_duration_level", 1)
    seconds = (_tun("harvest", "duration_seconds", 10.0)
               + (level - 1) * _tun("harvest", "duration_increase_per_level", 5.0))
    return int(seconds * 1000)


def harvest_multiplier(state: GameState) -> float:
    level = state.upgrades.get("harvest_multiplier_level", 1)
    return (_tun("harvest", "multiplier", 2.0)
            + (level - 1) * _tun("harvest", "multiplier_increase_per_level", 0.5))


def active_multiplier(state: GameState) -> float:
    return harvest_multiplier(state) if state.is_harvest else 1.0


def harvest_ready_in_ms(state: GameState, now: int) -> int:
    if state.last_harvest is None:
        return 0
    return max(0, state.last_harvest + harvest_cooldown_ms(state) - now)


def can_harvest(state: GameState, now: int) -> bool:
    return not state.is_harvest and harvest_ready_in_ms(state, now) == 0


def start_harvest(state: GameState, now: int, bus: EventBus | None = None) -> bool:
    if not can_harvest(state, now):
        return False
    state.last_harvest = now
    state.is_harvest = True
    state.bump("harvests")
    if bus:
        bus.emit(HarvestStarted(duration_ms=harvest_duration_ms(state),
                                multiplier=harvest_multiplier(state)))
    return True


def update_harvest(state: GameState, now: int, bus: EventBus | None = None) -> bool:
    """Close the boost window once it has run.  True on the closing call."""
    if not state.is_harvest:
        return False
    started = state.last_harvest or 0
    if now - started < harvest_duration_ms(state):
        return False
    state.is_harvest = False
    if bus:
        bus.emit(HarvestEnded())
    return True


# ── Reminders ────────────────────────────────────────────────────────

def export_reminder_due(state: GameState, now: int) -> bool:
    """True (once per period) when the player should export a backup."""
    period = int(_tun("persistence", "export_reminder_days", 7)) * _DAY_MS
    if now - state.last_export_reminder <= period:
        return False
    state.last_export_reminder = now
    return True


def new_game(now: datetime | None = None) -> GameState:
    """Default farm with the starter herd."""
    state = GameState(mooney=int(_tun("farm", "starting_mooney", 0)))
    for _ in range(int(_tun("farm", "starter_cows", 1))):
        state.cows.append(spawn_cow(state.cows, now=now))
    return state

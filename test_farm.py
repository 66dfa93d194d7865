"""test_farm.py — Shop, upgrades, harvest boost and reminders.

Every farm operation reports refusal through its return value; these
tests drive each one through its success and refusal paths and check
the mooney, statistics and events it leaves behind.

Run:  python test_farm.py
"""
from __future__ import annotations
import sys, traceback
from datetime import datetime

# ── Bootstrap ────────────────────────────────────────────────────────
from core.tuning import load as _load_tuning
_load_tuning()

from components.cow import Cow, stamp
from components.game_state import GameState
from core.events import (
    EventBus, AchievementUnlocked, CowBought, CowSold, UpgradeBought,
    HarvestStarted, HarvestEnded,
)
from data.cow_data import ACHIEVEMENTS, COW_PRICES, UPGRADE_PRICES
from logic import achievements, farm


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


NOW = datetime(2026, 10, 19, 12, 0, 0)
T0 = 1_800_000_000_000
MINUTE = 60_000
DAY_MS = 24 * 60 * MINUTE


# ═══════════════════════════════════════════════════════════════════════
#  1. Mooney
# ═══════════════════════════════════════════════════════════════════════

def test_mooney():
    print("\n── Mooney ──")
    state = GameState()
    check(farm.click(state) == 1 and state.mooney == 1, "a click pays the click level")
    state.upgrades["click_level"] = 3
    farm.click(state)
    check(state.mooney == 4, "click level 3 pays 3")
    check(state.stats["clicks"] == 2 and state.stats["mooney_earned"] == 4,
          "clicks and earnings are counted")
    check(not farm.spend_mooney(state, 5) and state.mooney == 4,
          "cannot overspend")
    check(farm.spend_mooney(state, 4) and state.mooney == 0, "exact spend works")
    farm.add_mooney(state, -10)
    check(state.mooney == 0, "negative income is ignored")


# ═══════════════════════════════════════════════════════════════════════
#  2. Cows
# ═══════════════════════════════════════════════════════════════════════

def test_buy_cow():
    print("\n── Buy ──")
    bus = EventBus()
    state = GameState()
    check(farm.farm_capacity(state) == 2, "farm level 1 holds two cows")
    check(farm.cow_price(state) == COW_PRICES[1], "the first cow is free")
    first = farm.buy_cow(state, bus, now=NOW, seed=42)
    check(first is not None and len(state.cows) == 1, "first cow bought")
    check(isinstance(bus.pending()[-1], CowBought), "CowBought emitted")

    check(farm.buy_cow(state, bus, now=NOW) is None and len(state.cows) == 1,
          "second cow refused without mooney")
    state.mooney = COW_PRICES[2] + 50
    second = farm.buy_cow(state, bus, now=NOW, seed=7)
    check(second is not None and state.mooney == 50, "second cow costs its price")
    check(second.name != first.name, "siblings get different names")
    check(state.stats["cows_bought"] == 2, "purchases are counted")

    state.mooney = 10 ** 9
    check(farm.cow_price(state) is None and farm.buy_cow(state) is None,
          "a full farm refuses more cows")
    state.upgrades["farm_level"] = 2
    check(farm.cow_price(state) == COW_PRICES[3], "a bigger farm sells the next cow")


def test_sell_and_rename():
    print("\n── Sell & rename ──")
    bus = EventBus()
    cow = Cow(id="c1", seed=1, name="Daisy", level=2, xp=30,
              last_pet=stamp(NOW), last_decay_check=stamp(NOW))
    state = GameState(cows=[cow])
    check(farm.rename_cow(state, "c1", "  Lady  Moo "), "rename accepted")
    check(cow.name == "Lady Moo", "name normalised", cow.name)
    check(not farm.rename_cow(state, "c1", "   ") and cow.name == "Lady Moo",
          "blank names are refused")
    check(not farm.rename_cow(state, "nope", "X"), "unknown cow cannot be renamed")
    check(state.stats["cows_renamed"] == 1, "only accepted renames are counted",
          str(state.stats["cows_renamed"]))

    price = farm.sell_cow(state, "c1", bus)
    check(price == 80 and state.mooney == 80, "sold for the cow's value", str(price))
    check(state.cows == [] and state.stats["cows_sold"] == 1, "cow removed and counted")
    check(isinstance(bus.pending()[-1], CowSold), "CowSold emitted")
    check(farm.sell_cow(state, "c1") is None, "selling twice does nothing")


# ═══════════════════════════════════════════════════════════════════════
#  3. Upgrades
# ═══════════════════════════════════════════════════════════════════════

def test_upgrades():
    print("\n── Upgrades ──")
    bus = EventBus()
    state = GameState(mooney=100)
    price = UPGRADE_PRICES["farm_level"][2]
    check(farm.upgrade_price(state, "farm_level") == price, "price of the next level")
    check(not farm.purchase_upgrade(state, "farm_level", bus), "refused when short")
    state.mooney = price + 1
    check(farm.purchase_upgrade(state, "farm_level", bus), "bought when affordable")
    check(state.upgrades["farm_level"] == 2 and state.mooney == 1, "level up, mooney spent")
    check(farm.farm_capacity(state) == 4, "capacity follows the farm level")
    check(state.stats["upgrades_bought"] == 1, "purchases are counted")
    ev = bus.pending()[-1]
    check(isinstance(ev, UpgradeBought) and ev.level == 2, "UpgradeBought emitted")

    state.upgrades["click_level"] = max(UPGRADE_PRICES["click_level"])
    state.mooney = 10 ** 9
    check(farm.upgrade_price(state, "click_level") is None
          and not farm.purchase_upgrade(state, "click_level"),
          "a maxed upgrade cannot be bought")
    check(farm.upgrade_price(state, "rocket_level") is None, "unknown upgrade has no price")


# ═══════════════════════════════════════════════════════════════════════
#  4. Harvest boost
# ═══════════════════════════════════════════════════════════════════════

def test_harvest_window():
    print("\n── Harvest window ──")
    bus = EventBus()
    state = GameState()
    check(farm.harvest_cooldown_ms(state) == 10 * MINUTE, "base cooldown 10 min")
    check(farm.harvest_duration_ms(state) == 10_000, "base duration 10 s")
    check(farm.harvest_multiplier(state) == 2.0, "base multiplier x2")
    check(farm.active_multiplier(state) == 1.0, "no boost before harvesting")

    check(farm.can_harvest(state, T0), "first harvest is available")
    check(farm.start_harvest(state, T0, bus), "harvest starts")
    check(state.is_harvest and state.last_harvest == T0, "window open and stamped")
    check(isinstance(bus.pending()[-1], HarvestStarted), "HarvestStarted emitted")
    check(farm.active_multiplier(state) == 2.0, "boost active")
    check(not farm.start_harvest(state, T0 + 1000), "cannot restart while active")

    check(not farm.update_harvest(state, T0 + 9_999) and state.is_harvest,
          "window still open before the duration")
    check(farm.update_harvest(state, T0 + 10_000, bus) and not state.is_harvest,
          "window closes at the duration")
    check(isinstance(bus.pending()[-1], HarvestEnded), "HarvestEnded emitted")
    check(not farm.update_harvest(state, T0 + 20_000), "closing only reports once")

    check(farm.harvest_ready_in_ms(state, T0 + 10_000) == 10 * MINUTE - 10_000,
          "cooldown runs from the harvest start")
    check(not farm.can_harvest(state, T0 + 5 * MINUTE), "still cooling down")
    check(farm.can_harvest(state, T0 + 10 * MINUTE), "ready after the cooldown")
    check(state.stats["harvests"] == 1, "harvests are counted")


def test_harvest_upgrades():
    print("\n── Harvest upgrades ──")
    state = GameState()
    state.upgrades.update(harvest_cooldown_level=3, harvest_duration_level=2,
                          harvest_multiplier_level=3)
    check(farm.harvest_cooldown_ms(state) == 8 * MINUTE, "cooldown shrinks per level")
    check(farm.harvest_duration_ms(state) == 15_000, "duration grows per level")
    check(farm.harvest_multiplier(state) == 3.0, "multiplier grows per level")


# ═══════════════════════════════════════════════════════════════════════
#  5. Reminders & new game
# ═══════════════════════════════════════════════════════════════════════

def test_export_reminder():
    print("\n── Export reminder ──")
    state = GameState(last_export_reminder=T0)
    check(not farm.export_reminder_due(state, T0 + 7 * DAY_MS), "not due at exactly 7 days")
    check(farm.export_reminder_due(state, T0 + 7 * DAY_MS + 1), "due after 7 days")
    check(state.last_export_reminder == T0 + 7 * DAY_MS + 1, "reminder is stamped")
    check(not farm.export_reminder_due(state, T0 + 8 * DAY_MS), "not again right away")


def test_new_game():
    print("\n── New game ──")
    state = farm.new_game(NOW)
    check(len(state.cows) == 1 and state.mooney == 0, "one starter cow, no mooney")
    check(state.cows[0].can_be_petted(NOW), "the starter cow can be petted today")
    check(all(v == 1 for v in state.upgrades.values()), "all upgrades at level 1")


def test_achievements():
    print("\n── Achievements ──")
    bus = EventBus()
    state = GameState()
    check(achievements.check(state, bus) == [] and state.achievements == {},
          "nothing unlocks on a fresh farm")

    farm.click(state)
    check(achievements.check(state, bus) == ["First Click"], "first click unlocks")
    ev = bus.pending()[-1]
    check(isinstance(ev, AchievementUnlocked) and ev.label == "First Click",
          "AchievementUnlocked emitted")
    check(achievements.check(state, bus) == [], "an unlock is reported once")

    state.stats["clicks"] = 0
    check(achievements.is_unlocked(state, "First Click"), "unlocks survive a stat reset")

    cow = Cow(id="c1", seed=1, name="Daisy")
    state.cows.append(cow)
    farm.rename_cow(state, "c1", "Clover")
    check("Name Tag" in achievements.check(state), "renaming unlocks Name Tag")

    rows = {label: (cur, target, done) for label, cur, target, done
            in achievements.summary(state)}
    check(len(rows) == len(ACHIEVEMENTS), "summary lists every achievement")
    state.stats["mooney_earned"] = 5_000_000
    check(achievements.progress(state, ACHIEVEMENTS[3]) == (1000, 1000),
          "progress is capped at the target")
    check(rows["Clicker"] == (0, 1000, False), "locked rows show progress")
    unlocked = achievements.check(state)
    check({"Pocket Change", "Cash Cow", "Mooneybags"} <= set(unlocked),
          "several targets can unlock in one check")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Mooney", test_mooney),
        ("Buy", test_buy_cow),
        ("Sell & rename", test_sell_and_rename),
        ("Upgrades", test_upgrades),
        ("Harvest window", test_harvest_window),
        ("Harvest upgrades", test_harvest_upgrades),
        ("Export reminder", test_export_reminder),
        ("New game", test_new_game),
        ("Achievements", test_achievements),
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
    print(f"  Farm Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)

"""data/cow_data.py — Static cow and shop tables.

Lookup tables that are not "tuning" (they are lists and keyed tables
rather than single knobs).  Order matters in the weighted tables: the
cumulative scan walks them top to bottom, so reordering entries changes
which cow a given seed produces.
"""

# ── Appearance ───────────────────────────────────────────────────────

# base<Colour> layer → relative weight
BASE_COLOURS = {
    "Black": 30,
    "Brown": 30,
    "White": 20,
    "Grey": 15,
    "Gold": 5,
}

GREY_BASE = "baseGrey"
ACCESSORY_LAYER = "tongue"
HORN_LAYER = "horns"
SPOT_LAYERS = ["spots1", "spots2", "spots3"]

# Placeholder fill colours for the pygame front-end (one per layer).
LAYER_COLOURS = {
    "baseBlack": (40, 40, 44),
    "baseBrown": (120, 78, 48),
    "baseWhite": (235, 232, 224),
    "baseGrey": (150, 150, 156),
    "baseGold": (214, 170, 60),
    "tongue": (230, 120, 140),
    "horns": (240, 230, 200),
    "spots1": (30, 30, 30),
    "spots2": (95, 60, 35),
    "spots3": (250, 250, 250),
}

# ── Animations (frame indices into the sheet; only counts matter here) ──

ANIMATIONS = {
    "eat": [5, 6, 7, 7, 7, 6, 5],
    "idle": [0],
    "idleToWalk": [0, 1, 2],
    "pet": [9, 10, 11, 10, 9],
    "walk": [12, 13, 14, 15],
    "walkToIdle": [2, 1, 0],
}

# ── Names ────────────────────────────────────────────────────────────

COW_NAMES = [
    "Bessie", "Daisy", "Buttercup", "Clarabelle", "Moo-rgan", "Bella",
    "Rosie", "Penny", "Hazel", "Maple", "Clover", "Dottie",
    "Millie", "Gertie", "Luna", "Peaches", "Marshmallow", "Biscuit",
    "Mocha", "Waffles", "Nutmeg", "Pudding", "Truffle", "Oreo",
]

# ── Rarity ───────────────────────────────────────────────────────────

# rarity → relative weight
RARITIES = {
    "common": 55,
    "uncommon": 25,
    "rare": 12,
    "epic": 6,
    "legendary": 2,
}

BASELINE_STATS = {
    "rarity": "common",
    "eat_chance": 1.0,
    "extra_mooney": 0,
    "value_multiplier": 1.0,
}

# rarity → stat → (low, high)
STAT_RANGES = {
    "common": {
        "eat_chance": (1.0, 1.1),
        "extra_mooney": (0, 1),
        "value_multiplier": (1.0, 1.1),
    },
    "uncommon": {
        "eat_chance": (1.1, 1.25),
        "extra_mooney": (1, 2),
        "value_multiplier": (1.1, 1.3),
    },
    "rare": {
        "eat_chance": (1.25, 1.5),
        "extra_mooney": (2, 4),
        "value_multiplier": (1.3, 1.6),
    },
    "epic": {
        "eat_chance": (1.5, 1.8),
        "extra_mooney": (4, 7),
        "value_multiplier": (1.6, 2.0),
    },
    "legendary": {
        "eat_chance": (1.8, 2.2),
        "extra_mooney": (7, 12),
        "value_multiplier": (2.0, 3.0),
    },
}

# ── Progression ──────────────────────────────────────────────────────

MAX_LEVEL = 10
MAX_HEARTS = 10

# level → xp needed to leave that level (level 10 has no entry)
XP_PER_LEVEL = {
    1: 50,
    2: 120,
    3: 250,
    4: 450,
    5: 750,
    6: 1200,
    7: 1800,
    8: 2600,
    9: 3600,
}

# ── Shop ─────────────────────────────────────────────────────────────

# herd size after purchase → price
COW_PRICES = {
    1: 0,
    2: 100,
    3: 300,
    4: 700,
    5: 1500,
    6: 3000,
    7: 6000,
    8: 10000,
    9: 16000,
    10: 25000,
    11: 40000,
    12: 60000,
}

# upgrade key → {next level → price}
UPGRADE_PRICES = {
    "farm_level": {2: 250, 3: 1500, 4: 8000, 5: 30000, 6: 90000},
    "click_level": {2: 100, 3: 400, 4: 1600, 5: 6400},
    "harvest_cooldown_level": {2: 500, 3: 2000, 4: 8000, 5: 20000},
    "harvest_duration_level": {2: 400, 3: 1600, 4: 6400, 5: 16000},
    "harvest_multiplier_level": {2: 800, 3: 3200, 4: 12800, 5: 40000},
}

UPGRADE_KEYS = list(UPGRADE_PRICES)

STAT_KEYS = [
    "clicks", "mooney_earned", "upgrades_bought", "cows_bought",
    "cows_sold", "cows_renamed", "times_petted", "harvests",
]

# Achievements unlock once a stat reaches its target.  Labels are the
# persisted keys, so renaming one re-locks it in existing saves.
ACHIEVEMENTS = [
    {"label": "First Click", "stat": "clicks", "target": 1},
    {"label": "Clicker", "stat": "clicks", "target": 1000},
    {"label": "Carpal Tunnel", "stat": "clicks", "target": 10000},
    {"label": "Pocket Change", "stat": "mooney_earned", "target": 1000},
    {"label": "Cash Cow", "stat": "mooney_earned", "target": 100000},
    {"label": "Mooneybags", "stat": "mooney_earned", "target": 1000000},
    {"label": "Handyman", "stat": "upgrades_bought", "target": 5},
    {"label": "Fully Upgraded", "stat": "upgrades_bought", "target": 21},
    {"label": "Growing Herd", "stat": "cows_bought", "target": 5},
    {"label": "Cattle Baron", "stat": "cows_bought", "target": 25},
    {"label": "Trader", "stat": "cows_sold", "target": 1},
    {"label": "Name Tag", "stat": "cows_renamed", "target": 1},
    {"label": "Best Friend", "stat": "times_petted", "target": 10},
    {"label": "Cow Whisperer", "stat": "times_petted", "target": 100},
    {"label": "Harvest Moon", "stat": "harvests", "target": 10},
]

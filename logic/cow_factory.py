"""logic/cow_factory.py — Procedural cow generation.

A cow's whole appearance and stat block come from one seeded stream,
consumed in a fixed order:

    1. base colour         (weighted pick)
    2. horns / spots       (chance rolls, spot variant)
    3. colour filters      (grey base mutate roll, one filter per spot layer)
    4. name                (sibling-aware pick)
    5. rarity + stats      (only when step 3 produced a filter)
    6. voice pitch

Changing the order (or the tables in ``data/cow_data.py``) changes which
cow a seed produces.  Rarity is tied to the cosmetic roll: plain cows
are always baseline commons.

    cow = spawn_cow(state.cows)              # random seed
    cow = spawn_cow([], seed=42)             # reproducible
"""

from __future__ import annotations
import uuid
from datetime import datetime, timedelta

from components.cow import Cow, CowStats, LayerFilter, SpriteInfo, stamp
from core.rng import Stream, create_stream, random_seed, uniform, weighted_pick
from core.tuning import get as _tun
from data.cow_data import (
    ACCESSORY_LAYER, BASE_COLOURS, COW_NAMES, GREY_BASE, HORN_LAYER,
    RARITIES, SPOT_LAYERS, STAT_RANGES,
)


def _range(key: str, default: tuple[float, float]) -> tuple[float, float]:
    low, high = _tun("cow.filters", key, list(default))
    return float(low), float(high)


def random_filter(draw: Stream) -> LayerFilter:
    """Draw hue, saturate, contrast, brightness in that order."""
    return LayerFilter(
        hue=uniform(draw, *_range("hue", (0.0, 360.0))),
        saturate=uniform(draw, *_range("saturate", (-0.6, 0.6))),
        contrast=uniform(draw, *_range("contrast", (-0.3, 0.3))),
        brightness=uniform(draw, *_range("brightness", (0.8, 1.2))),
    )


def create_sprite_info(draw: Stream) -> SpriteInfo:
    sprite = SpriteInfo()

    colour = weighted_pick(draw, BASE_COLOURS)
    sprite.layers.append(f"base{colour}")
    sprite.layers.append(ACCESSORY_LAYER)

    if draw() < _tun("cow", "horn_chance", 0.35):
        sprite.layers.append(HORN_LAYER)

    if draw() < _tun("cow", "spot_chance", 0.40):
        sprite.layers.append(SPOT_LAYERS[int(draw() * len(SPOT_LAYERS))])

    if GREY_BASE in sprite.layers and draw() < _tun("cow", "colour_mutate_chance", 0.5):
        sprite.filters[GREY_BASE] = random_filter(draw)

    for layer in SPOT_LAYERS:
        if layer in sprite.layers:
            sprite.filters[layer] = random_filter(draw)

    return sprite


def create_name(draw: Stream, existing_names) -> str:
    """Pick a name no sibling has; append `` 2``, `` 3``... once the pool runs dry."""
    taken = set(existing_names or ())
    if not taken:
        return COW_NAMES[int(draw() * len(COW_NAMES))]

    available = [n for n in COW_NAMES if n not in taken]
    if available:
        return available[int(draw() * len(available))]

    base = COW_NAMES[int(draw() * len(COW_NAMES))]
    name = base
    counter = 2
    while name in taken:
        name = f"{base} {counter}"
        counter += 1
    return name


def _stat(draw: Stream, rarity: str, stat: str, as_int: bool = False):
    low, high = STAT_RANGES[rarity][stat]
    value = uniform(draw, low, high)
    if as_int:
        return int(round(value))
    return round(value, 2)


def create_stats(draw: Stream, sprite: SpriteInfo) -> CowStats:
    if not sprite.filters:
        return CowStats()

    rarity = weighted_pick(draw, RARITIES)
    return CowStats(
        rarity=rarity,
        eat_chance=_stat(draw, rarity, "eat_chance"),
        extra_mooney=_stat(draw, rarity, "extra_mooney", as_int=True),
        value_multiplier=_stat(draw, rarity, "value_multiplier"),
    )


def generate_cow(draw: Stream, existing_names=(), *, seed: int = 0,
                 now: datetime | None = None) -> Cow:
    """Build a cow from *draw*.  Same stream state → same cow."""
    now = now or datetime.now()
    yesterday = stamp(now - timedelta(days=1))

    sprite = create_sprite_info(draw)
    name = create_name(draw, existing_names)
    stats = create_stats(draw, sprite)
    pitch = round(0.8 + 0.8 * draw(), 2)

    return Cow(
        id=uuid.uuid4().hex,
        seed=seed,
        sprite=sprite,
        name=name,
        stats=stats,
        pitch=pitch,
        last_pet=yesterday,
        last_decay_check=yesterday,
    )


def spawn_cow(siblings=(), *, seed: int | None = None,
              now: datetime | None = None) -> Cow:
    """Roll a brand-new cow next to *siblings* (the current herd)."""
    if seed is None:
        seed = random_seed()
    names = [c.name for c in siblings]
    return generate_cow(create_stream(seed), names, seed=seed, now=now)

"""logic/behavior.py — Per-cow behaviour state machine.

Advanced once per rendered frame by the herd.  Modes and the animation
each one shows:

    idle ──(eat roll)──────────────→ eat  ──(7 frames)──→ idle + cooldown
    idle ──(walk roll)─→ idleToWalk ─────(3 frames)─────→ walk
    walk ──(idle roll)─→ walkToIdle ─────(3 frames)─────→ idle
    any  ──(request_pet)──────────→ pet  ──(5 frames)──→ idle

Timed animations are a ``time_left`` countdown on the behaviour record;
while it runs the cow does not move and no rolls are made.  Counters
(``idle_ticks``, ``walk_ticks``, ``eat_cooldown``) count ticks, not
seconds, so a cow on a slow machine changes its mind less often per
second but walks the same distance (movement is scaled by ``dt``).
"""

from __future__ import annotations
import math
from datetime import datetime

from components.behavior import CowBehavior, CowMode
from components.cow import Cow
from core.rng import create_stream, uniform
from core.tuning import get as _tun
from data.cow_data import ANIMATIONS
from logic.play_area import PlayArea

FPS_REFERENCE = 60.0


def anim_duration(anim: str) -> float:
    """Seconds a one-shot animation takes to play through."""
    return len(ANIMATIONS[anim]) * float(_tun("behavior", "frame_time", 1 / 6))


def new_behavior(cow: Cow, area: PlayArea) -> CowBehavior:
    """Fresh runtime record: random spot on the pasture, random heading."""
    draw = create_stream(cow.seed)
    b = CowBehavior(cow_id=cow.id, draw=draw)
    min_x, max_x, min_y, max_y = area.bounds
    b.x = uniform(draw, min_x, max_x)
    b.y = uniform(draw, min_y, max_y)
    dx, dy = draw() - 0.5, draw() - 0.5
    length = math.hypot(dx, dy) or 1.0
    b.dx, b.dy = dx / length, dy / length
    b.facing = -1 if b.dx < 0 else 1
    return b


def _start(b: CowBehavior, mode: CowMode, anim: str) -> None:
    b.mode = mode
    b.anim = anim
    b.time_left = anim_duration(anim)


def _enter_idle(b: CowBehavior) -> None:
    b.mode = CowMode.IDLE
    b.anim = "idle"
    b.idle_ticks = 0


# ── Tick ─────────────────────────────────────────────────────────────

def tick_behavior(b: CowBehavior, cow: Cow, dt: float, area: PlayArea,
                  harvest_multiplier: float = 1.0) -> int:
    """Advance one frame.  Returns mooney produced this frame (usually 0)."""
    if b.time_left > 0.0:
        b.time_left -= dt
        if b.time_left > 0.0:
            return 0
        b.time_left = 0.0
        return _finish_segment(b, cow, harvest_multiplier)

    if b.mode is CowMode.IDLE:
        _idle_step(b, cow)
    elif b.mode is CowMode.WALK:
        _walk_step(b, dt, area)
    else:
        # eat / pet with no time left (e.g. frame_time tuned to 0)
        return _finish_segment(b, cow, harvest_multiplier)
    return 0


def _finish_segment(b: CowBehavior, cow: Cow, harvest_multiplier: float) -> int:
    if b.mode is CowMode.EAT:
        gained = cow.eat(harvest_multiplier)
        b.eat_cooldown = int(_tun("behavior", "eat_cooldown_ticks", 600))
        _enter_idle(b)
        return gained
    if b.mode is CowMode.PET:
        b.petting = False
        _enter_idle(b)
        return 0
    if b.mode is CowMode.WALK:
        b.anim = "walk"
        b.walk_ticks = 0
    else:
        _enter_idle(b)
    return 0


def _idle_step(b: CowBehavior, cow: Cow) -> None:
    b.idle_ticks += 1

    if b.eat_cooldown > 0:
        b.eat_cooldown -= 1
    elif b.draw() < _tun("behavior", "eat_probability", 0.004) * cow.stats.eat_chance:
        _start(b, CowMode.EAT, "eat")
        return

    min_idle = int(_tun("behavior", "min_idle_ticks", 180))
    if b.idle_ticks > min_idle and b.draw() < _tun("behavior", "idle_walk_chance", 0.01):
        _start(b, CowMode.WALK, "idleToWalk")
        b.walk_ticks = 0


def _walk_step(b: CowBehavior, dt: float, area: PlayArea) -> None:
    b.walk_ticks += 1

    min_walk = int(_tun("behavior", "min_walk_ticks", 240))
    if b.walk_ticks > min_walk and b.draw() < _tun("behavior", "idle_walk_chance", 0.01):
        _start(b, CowMode.IDLE, "walkToIdle")
        b.idle_ticks = 0
        return

    move(b, dt, area)


def move(b: CowBehavior, dt: float, area: PlayArea) -> None:
    """Jitter the heading, step forward, bounce off the pasture edges."""
    jitter = float(_tun("behavior", "direction_jitter", 0.1))
    speed = float(_tun("behavior", "walk_speed", 0.6))
    delta = dt * FPS_REFERENCE

    dx = b.dx + (b.draw() - 0.5) * jitter
    dy = b.dy + (b.draw() - 0.5) * jitter
    length = math.hypot(dx, dy) or 1.0
    dx /= length
    dy /= length

    x = b.x + dx * speed * delta
    y = b.y + dy * speed * delta

    min_x, max_x, min_y, max_y = area.bounds
    if x < min_x:
        x = min_x
        dx = abs(dx)
    elif x > max_x:
        x = max_x
        dx = -abs(dx)
    if y < min_y:
        y = min_y
        dy = abs(dy)
    elif y > max_y:
        y = max_y
        dy = -abs(dy)

    b.x, b.y = x, y
    b.dx, b.dy = dx, dy
    if dx < 0:
        b.facing = -1
    elif dx > 0:
        b.facing = 1


# ── External requests ────────────────────────────────────────────────

def request_pet(b: CowBehavior, cow: Cow, now: datetime | None = None) -> int | None:
    """Play the pet animation and pet the cow.

    Returns hearts gained (0 when the cow was already petted today), or
    None when a pet animation is still playing.  Petting interrupts
    whatever the cow was doing, including an unfinished meal.
    """
    if b.petting:
        return None
    b.petting = True
    _start(b, CowMode.PET, "pet")
    before = cow.hearts
    cow.pet(now)
    return cow.hearts - before

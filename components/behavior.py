"""components.behavior — Per-cow runtime state for the behaviour engine.

Not persisted.  The herd builds one ``CowBehavior`` per cow id when the
cow appears and throws it away when the cow leaves, so anything tied to
a cow (running animation, pet latch, cooldowns) disappears with it.

Positions are in pixels of the play area; ``time_left`` is seconds.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from core.rng import Stream


class CowMode(Enum):
    IDLE = "idle"
    WALK = "walk"
    EAT = "eat"
    PET = "pet"


@dataclass
class CowBehavior:
    cow_id: str
    draw: Stream = field(repr=False)
    x: float = 0.0
    y: float = 0.0
    dx: float = 0.0          # unit direction
    dy: float = 0.0
    facing: int = 1          # +1 right, -1 left
    mode: CowMode = CowMode.IDLE
    anim: str = "idle"
    # Remaining seconds of a blocking animation (transition, eat, pet).
    time_left: float = 0.0
    idle_ticks: int = 0
    walk_ticks: int = 0
    eat_cooldown: int = 0    # ticks
    petting: bool = False    # one pet animation at a time

    @property
    def busy(self) -> bool:
        return self.time_left > 0.0


@dataclass
class CowView:
    """What the renderer needs for one cow this frame."""
    id: str
    x: float
    y: float
    scale: float
    facing: int
    anim: str

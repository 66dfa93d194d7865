"""components — Farm data records, organised by concern.

Submodules
----------
cow         Cow, SpriteInfo, LayerFilter, CowStats
game_state  GameState (the farm aggregate)
behavior    CowBehavior, CowMode, CowView (runtime only, never saved)
dev_log     DevLog

All public names are re-exported here so code can do
``from components import Cow``.
"""

from components.cow import Cow, CowStats, LayerFilter, SpriteInfo
from components.game_state import GameState
from components.behavior import CowBehavior, CowMode, CowView
from components.dev_log import DevLog

__all__ = [
    "Cow", "CowStats", "LayerFilter", "SpriteInfo",
    "GameState",
    "CowBehavior", "CowMode", "CowView",
    "DevLog",
]

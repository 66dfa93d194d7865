"""logic/play_area.py — Pasture geometry.

The pasture is the lower ``land_ratio`` share of the window.  Cows are
drawn larger on bigger windows; the scale is a clamped linear map of
the window area.  All values are pixels.
"""

from __future__ import annotations
from dataclasses import dataclass

from core.tuning import get as _tun


def cow_scale(area: float) -> float:
    min_area = float(_tun("area", "min_area", 300000))
    max_area = float(_tun("area", "max_area", 2000000))
    min_scale = float(_tun("area", "min_scale", 1.0))
    max_scale = float(_tun("area", "max_scale", 2.5))
    if area <= min_area:
        return min_scale
    if area >= max_area:
        return max_scale
    return min_scale + (area - min_area) * (max_scale - min_scale) / (max_area - min_area)


@dataclass(frozen=True)
class PlayArea:
    width: float
    height: float

    @property
    def scale(self) -> float:
        return cow_scale(self.width * self.height)

    @property
    def half_size(self) -> float:
        """Half the on-screen cow size."""
        return float(_tun("area", "frame_size", 64)) * self.scale / 2

    @property
    def land_top(self) -> float:
        land_ratio = float(_tun("area", "land_ratio", 0.6))
        frame = float(_tun("area", "frame_size", 64))
        return self.height * (1 - land_ratio) - frame * self.scale

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(min_x, max_x, min_y, max_y) for a cow's centre."""
        half = self.half_size
        return (half, self.width - half,
                self.land_top + half, self.height - half)

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        min_x, max_x, min_y, max_y = self.bounds
        return (min(max(x, min_x), max_x), min(max(y, min_y), max_y))

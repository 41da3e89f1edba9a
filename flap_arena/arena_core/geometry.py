"""
Geometry helpers shared by the simulation subsystems.
"""

from __future__ import annotations

import math
from typing import Tuple

# Unit vector used when a direction is requested between coincident points
NEUTRAL_DIRECTION = (-1.0, 0.0)


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds."""
    return lo if x < lo else hi if x > hi else x


def normalize(
    x: float,
    y: float,
    eps: float = 1e-8,
    fallback: Tuple[float, float] = NEUTRAL_DIRECTION
) -> Tuple[float, float]:
    """Normalize a vector to unit length, returning `fallback` for zero length."""
    length = math.hypot(x, y)
    if length < eps or math.isnan(length):
        return fallback
    return x / length, y / length


def direction_to(
    from_x: float,
    from_y: float,
    to_x: float,
    to_y: float
) -> Tuple[float, float]:
    """Unit vector pointing from one point to another."""
    return normalize(to_x - from_x, to_y - from_y)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles overlap."""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) < (rr * rr)


def aabb_overlap(
    left1: float, top1: float, right1: float, bottom1: float,
    left2: float, top2: float, right2: float, bottom2: float
) -> bool:
    """Check if two axis-aligned boxes overlap (edges touching do not count)."""
    return right1 > left2 and left1 < right2 and bottom1 > top2 and top1 < bottom2

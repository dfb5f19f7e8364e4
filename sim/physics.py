#!/usr/bin/env python3
"""
sim/physics.py
==============
Low-level kinematics helpers used by :mod:`sim.vehicle` and :mod:`sim.fleet`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math
from typing import Dict, Tuple

from sim.types import Direction

# Unit travel vector for a vehicle *originating* from each side
# (screen coordinates, y grows downward).
_TRAVEL_AXIS: Dict[Direction, Tuple[float, float]] = {
    Direction.NORTH: (0.0, 1.0),
    Direction.EAST: (-1.0, 0.0),
    Direction.SOUTH: (0.0, -1.0),
    Direction.WEST: (1.0, 0.0),
}


def approach_ahead(origin: Direction, x: float, y: float,
                   other_x: float, other_y: float) -> float:
    """Signed distance *other* lies ahead of *(x, y)* along the approach axis.

    Positive → *other* is further along the direction of travel.
    Zero / negative → level with or behind.
    """
    ax, ay = _TRAVEL_AXIS[origin]
    return (other_x - x) * ax + (other_y - y) * ay


def approach_lateral(origin: Direction, x: float, y: float,
                     other_x: float, other_y: float) -> float:
    """Unsigned offset of *other* across the approach axis from *(x, y)*."""
    ax, ay = _TRAVEL_AXIS[origin]
    return abs((other_x - x) * -ay + (other_y - y) * ax)


def advance(x: float, y: float, heading: float, distance: float) -> Tuple[float, float]:
    """Translate *(x, y)* by *distance* along *heading*."""
    return x + math.cos(heading) * distance, y + math.sin(heading) * distance


def approach_speed(speed: float, target: float, rate: float, dt: float) -> float:
    """Move *speed* toward *target* by at most ``rate * dt``, never below zero."""
    if speed < target:
        return min(target, speed + rate * dt)
    return max(target, max(0.0, speed - rate * dt))


def is_finite_xy(x: float, y: float) -> bool:
    return math.isfinite(x) and math.isfinite(y)

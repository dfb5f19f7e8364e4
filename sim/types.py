"""
sim/types.py
============
Enumerations and small value types shared by every simulation module.

The scene uses screen coordinates: x grows to the right, y grows
downward, and a heading of ``0`` faces the positive x-axis.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, NamedTuple, Tuple


class Direction(str, Enum):
    """Compass side a vehicle originates from (clockwise order)."""

    NORTH = "NORTH"
    EAST = "EAST"
    SOUTH = "SOUTH"
    WEST = "WEST"


DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.EAST,
    Direction.SOUTH,
    Direction.WEST,
)


class TurnType(str, Enum):
    STRAIGHT = "STRAIGHT"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class LightColor(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"


class VehicleState(str, Enum):
    """Per-vehicle traffic-flow states, in lifecycle order."""

    APPROACHING = "APPROACHING"
    WAITING = "WAITING"
    CROSSING = "CROSSING"
    EXITING = "EXITING"
    COMPLETED = "COMPLETED"


# Lane 0 is right-turn only; lane 1 carries straight and left traffic.
LANES: Tuple[int, ...] = (0, 1)

LightStateMap = Mapping[Direction, LightColor]


class Point(NamedTuple):
    x: float
    y: float


class Pose(NamedTuple):
    """Planar position plus heading in radians."""

    x: float
    y: float
    heading: float


class StopLine(NamedTuple):
    """Segment perpendicular to an approach, from (x1, y1) to (x2, y2)."""

    x1: float
    y1: float
    x2: float
    y2: float

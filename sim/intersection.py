#!/usr/bin/env python3
"""
sim/intersection.py
===================
Geometry of a single four-way intersection with two inbound lanes per
approach.

:class:`IntersectionGeometry` is a pure calculator: it turns an approach
direction and a turn type into entry / exit / stop / spawn anchor points
and into the ``(length, curvature)`` segment lists consumed by
:mod:`sim.trajectory`.  Every lookup is total over the enumerated domain
and falls back to a best-effort default for anything else, so the
simulation loop never has to handle a geometry failure.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

import config
from sim.trajectory import TrajectorySpec, build_trajectory
from sim.types import DIRECTIONS, Direction, Point, Pose, StopLine, TurnType

log = logging.getLogger("intersection")

STOP_LINE_CLEARANCE: float = 10.0
"""Stop lines sit this far inside the intersection's outer boundary."""

# Turn shapes: (run-in straight, arc radius, run-out straight).
LEFT_TURN: Tuple[float, float, float] = (12.0, 14.0, 12.0)
RIGHT_TURN: Tuple[float, float, float] = (16.0, 18.0, 16.0)

# Heading a vehicle faces when entering from each side.
_INITIAL_HEADING: Dict[Direction, float] = {
    Direction.NORTH: math.pi / 2,    # facing down the screen
    Direction.EAST: math.pi,
    Direction.SOUTH: -math.pi / 2,
    Direction.WEST: 0.0,
}

# Steps around the N/E/S/W ring from the origin to the side the turn ends
# up heading toward.  With y growing downward a positive-curvature (LEFT)
# turn from NORTH ends westbound.
_TURN_STEPS: Dict[TurnType, int] = {
    TurnType.STRAIGHT: 2,
    TurnType.RIGHT: 1,
    TurnType.LEFT: 3,
}


class IntersectionGeometry:
    """Anchor points and turn paths for one intersection.

    Parameters
    ----------
    center_x, center_y : float
        Intersection centre in scene coordinates.  Defaults to the scene
        centre.
    scene_width, scene_height : float
        Scene bounds; spawn and exit anchors sit on these edges.
    size : float
        Outer size of the intersection area (stop lines are derived from it).
    road_width : float
        Full road width (four lanes); also the side of the square footprint.
    lane_width : float
        Width of one lane.
    """

    def __init__(
        self,
        center_x: Optional[float] = None,
        center_y: Optional[float] = None,
        scene_width: float = config.SCENE_WIDTH,
        scene_height: float = config.SCENE_HEIGHT,
        size: float = config.INTERSECTION_SIZE,
        road_width: float = config.ROAD_WIDTH,
        lane_width: float = config.LANE_WIDTH,
    ) -> None:
        self.scene_width = float(scene_width)
        self.scene_height = float(scene_height)
        self.cx = self.scene_width / 2 if center_x is None else float(center_x)
        self.cy = self.scene_height / 2 if center_y is None else float(center_y)
        self.size = float(size)
        self.road_width = float(road_width)
        self.lane_width = float(lane_width)
        self._calculate_positions()

    # ── precomputed tables ────────────────────────────────────────────────

    def _calculate_positions(self) -> None:
        cx, cy = self.cx, self.cy
        w, h = self.scene_width, self.scene_height
        half_road = self.road_width / 2
        lane_center = self.lane_width * 0.5
        stop = self.size / 2 - STOP_LINE_CLEARANCE

        self._entry: Dict[Direction, Point] = {
            Direction.NORTH: Point(cx - lane_center, cy - half_road),
            Direction.EAST: Point(cx + half_road, cy - lane_center),
            Direction.SOUTH: Point(cx + lane_center, cy + half_road),
            Direction.WEST: Point(cx - half_road, cy + lane_center),
        }

        self._stop_lines: Dict[Direction, StopLine] = {
            Direction.NORTH: StopLine(cx - half_road, cy - stop, cx + half_road, cy - stop),
            Direction.EAST: StopLine(cx + stop, cy - half_road, cx + stop, cy + half_road),
            Direction.SOUTH: StopLine(cx - half_road, cy + stop, cx + half_road, cy + stop),
            Direction.WEST: StopLine(cx - stop, cy - half_road, cx - stop, cy + half_road),
        }

        # Lane 0 sits closest to the centreline, lane 1 one lane further out.
        self._spawn: Dict[Direction, List[Point]] = {}
        self._default_spawn: Dict[Direction, Point] = {}
        for direction in DIRECTIONS:
            self._spawn[direction] = [
                self._edge_point(direction, self.lane_width * 0.25),
                self._edge_point(direction, self.lane_width * 0.75),
            ]
            self._default_spawn[direction] = self._edge_point(direction, lane_center)

        # Outbound lane centre on each scene edge, for traffic heading there.
        self._edge_exit: Dict[Direction, Point] = {
            Direction.NORTH: Point(cx + lane_center, 0.0),
            Direction.EAST: Point(w, cy + lane_center),
            Direction.SOUTH: Point(cx - lane_center, h),
            Direction.WEST: Point(0.0, cy - lane_center),
        }

        # Default exit per origin: straight across to the opposite edge.
        self._default_exit: Dict[Direction, Point] = {
            d: self._edge_exit[self.destination(d, TurnType.STRAIGHT)]
            for d in DIRECTIONS
        }

        self._exit: Dict[Tuple[Direction, TurnType], Point] = {
            (d, t): self._edge_exit[self.destination(d, t)]
            for d in DIRECTIONS
            for t in TurnType
        }

    def _edge_point(self, direction: Direction, offset: float) -> Point:
        """Point on the scene edge of *direction*, *offset* from the centreline."""
        if direction == Direction.NORTH:
            return Point(self.cx - offset, 0.0)
        if direction == Direction.EAST:
            return Point(self.scene_width, self.cy - offset)
        if direction == Direction.SOUTH:
            return Point(self.cx + offset, self.scene_height)
        return Point(0.0, self.cy + offset)

    # ── anchor lookups ────────────────────────────────────────────────────

    def entry_point(self, direction: Direction) -> Point:
        """Where a turn path starts: intersection boundary, inner lane centre."""
        return self._entry.get(direction, Point(self.cx, self.cy))

    def exit_point(self, direction: Direction, turn_type: TurnType) -> Point:
        """Outbound lane centre on the destination edge for this manoeuvre."""
        point = self._exit.get((direction, turn_type))
        if point is None:
            log.warning("No exit point for %s/%s, using default", direction, turn_type)
            return self._default_exit.get(direction, Point(self.cx, self.cy))
        return point

    def default_exit_point(self, direction: Direction) -> Point:
        return self._default_exit.get(direction, Point(self.cx, self.cy))

    def stop_line(self, direction: Direction) -> StopLine:
        line = self._stop_lines.get(direction)
        if line is None:
            return StopLine(self.cx, self.cy, self.cx, self.cy)
        return line

    def spawn_point(self, direction: Direction, lane: int) -> Point:
        """Scene-edge spawn anchor for *lane* of *direction*."""
        lanes = self._spawn.get(direction)
        if lanes is not None and lane in (0, 1):
            return lanes[lane]
        return self._default_spawn.get(direction, Point(self.cx, self.cy))

    def initial_heading(self, direction: Direction) -> float:
        return _INITIAL_HEADING.get(direction, 0.0)

    def destination(self, direction: Direction, turn_type: TurnType) -> Direction:
        """Side of the intersection a manoeuvre leaves through."""
        if direction not in DIRECTIONS:
            return Direction.SOUTH
        idx = DIRECTIONS.index(direction)
        return DIRECTIONS[(idx + _TURN_STEPS.get(turn_type, 2)) % 4]

    # ── paths ─────────────────────────────────────────────────────────────

    def compile_turn_segments(
        self, direction: Direction, turn_type: TurnType,
    ) -> Tuple[List[float], List[float]]:
        """``(lengths, curvatures)`` describing the path through the box.

        Left turns bend with positive curvature, right turns with negative.
        """
        if turn_type == TurnType.LEFT:
            run_in, radius, run_out = LEFT_TURN
            return [run_in, math.pi / 2 * radius, run_out], [0.0, 1.0 / radius, 0.0]
        if turn_type == TurnType.RIGHT:
            run_in, radius, run_out = RIGHT_TURN
            return [run_in, math.pi / 2 * radius, run_out], [0.0, -1.0 / radius, 0.0]
        entry = self.entry_point(direction)
        exit_ = self.exit_point(direction, turn_type)
        return [math.hypot(exit_.x - entry.x, exit_.y - entry.y)], [0.0]

    def build_path(self, direction: Direction, turn_type: TurnType) -> TrajectorySpec:
        """Trajectory starting at the entry point with the approach heading."""
        entry = self.entry_point(direction)
        lengths, curvatures = self.compile_turn_segments(direction, turn_type)
        spec = build_trajectory(
            Pose(entry.x, entry.y, self.initial_heading(direction)),
            lengths,
            curvatures,
        )
        log.debug("Path %s/%s: %d segments, %.1f long",
                  direction.value, turn_type.value, spec.segment_count, spec.total_length)
        return spec

    # ── predicates ────────────────────────────────────────────────────────

    def contains(self, x: float, y: float) -> bool:
        """True inside the intersection footprint (square of side road_width)."""
        half = self.road_width / 2
        return (self.cx - half <= x <= self.cx + half
                and self.cy - half <= y <= self.cy + half)

    def outside_scene(self, x: float, y: float, margin: float = 0.0) -> bool:
        """True once *(x, y)* lies beyond the scene bounds grown by *margin*."""
        return (x < -margin or x > self.scene_width + margin
                or y < -margin or y > self.scene_height + margin)

    def distance_to_stop_line(
        self, direction: Direction, x: float, y: float, length: float = 0.0,
    ) -> float:
        """Gap from a vehicle's front (centre + ``length / 2``) to its stop
        line, clamped at zero once the line is reached."""
        line = self.stop_line(direction)
        half = length / 2
        if direction == Direction.NORTH:
            return max(0.0, line.y1 - y - half)
        if direction == Direction.EAST:
            return max(0.0, x - half - line.x1)
        if direction == Direction.SOUTH:
            return max(0.0, y - half - line.y1)
        if direction == Direction.WEST:
            return max(0.0, line.x1 - x - half)
        return 0.0

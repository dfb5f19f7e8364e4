#!/usr/bin/env python3
"""
sim/trajectory.py
=================
Piecewise-arc trajectory engine.

A trajectory is a chain of segments, each either a straight line or a
circular arc, given as ``(length, curvature)`` pairs.  :func:`build_trajectory`
precomputes the stitching points between segments once; :func:`sample_at`
then resolves the position at any arc-length.

Curvature is the signed reciprocal radius: positive values rotate the
heading counter-clockwise in the math sense (heading grows), negative
values rotate it the other way.  Straight segments carry a sentinel centre
far away instead of a real one; sampling uses it to tell the two kinds
apart.

Neither function raises for finite input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Sequence, Tuple

from sim.types import Point, Pose

STRAIGHT_EPS: float = 1e-6
"""Curvatures below this magnitude are treated as straight."""

STRAIGHT_RADIUS: float = 1e6
"""Radius used in place of infinity for straight segments."""

_NO_CENTER: float = 1e6


class StitchPoint(NamedTuple):
    """Segment boundary: cumulative arc-length, heading, position and the
    centre of the arc that *starts* here."""

    arc_length: float
    heading: float
    x: float
    y: float
    center_x: float = _NO_CENTER
    center_y: float = _NO_CENTER


@dataclass(frozen=True)
class TrajectorySpec:
    """Immutable, precomputed trajectory.

    ``points`` always holds ``segment_count + 1`` entries.
    """

    points: Tuple[StitchPoint, ...]

    @property
    def segment_count(self) -> int:
        return len(self.points) - 1

    @property
    def total_length(self) -> float:
        return self.points[-1].arc_length

    @property
    def start(self) -> Pose:
        p = self.points[0]
        return Pose(p.x, p.y, p.heading)

    @property
    def end(self) -> Pose:
        p = self.points[-1]
        return Pose(p.x, p.y, p.heading)

    def is_finite(self) -> bool:
        """True when every stored number is finite."""
        return all_finite(v for p in self.points for v in p)


def _radius(curvature: float) -> Tuple[bool, float]:
    straight = abs(curvature) < STRAIGHT_EPS
    return straight, (STRAIGHT_RADIUS if straight else 1.0 / curvature)


def build_trajectory(
    start: Pose,
    segment_lengths: Sequence[float],
    segment_curvatures: Sequence[float],
) -> TrajectorySpec:
    """Precompute the stitching points of a trajectory.

    Parameters
    ----------
    start : Pose
        Position and heading at arc-length zero.
    segment_lengths : sequence of float
        Arc-length of each segment.
    segment_curvatures : sequence of float
        Signed curvature of each segment.  When the two sequences differ
        in length only their common prefix is used.

    Returns
    -------
    TrajectorySpec
    """
    u, phi, x, y = 0.0, float(start.heading), float(start.x), float(start.y)
    points = []
    for length, curv in zip(segment_lengths, segment_curvatures):
        straight, r = _radius(curv)
        u_next = u + length
        phi_next = phi + curv * length
        if straight:
            cx = cy = _NO_CENTER
            x_next = x + length * math.cos(phi)
            y_next = y + length * math.sin(phi)
        else:
            cx = x - r * math.sin(phi)
            cy = y + r * math.cos(phi)
            x_next = cx + r * math.sin(phi_next)
            y_next = cy - r * math.cos(phi_next)
        points.append(StitchPoint(u, phi, x, y, cx, cy))
        u, phi, x, y = u_next, phi_next, x_next, y_next
    points.append(StitchPoint(u, phi, x, y))
    return TrajectorySpec(tuple(points))


def straight_trajectory(start: Point, end: Point) -> TrajectorySpec:
    """Single straight segment from *start* to *end*."""
    dx, dy = end.x - start.x, end.y - start.y
    heading = math.atan2(dy, dx)
    return build_trajectory(
        Pose(start.x, start.y, heading), [math.hypot(dx, dy)], [0.0],
    )


def _segment_index(arc_length: float, spec: TrajectorySpec) -> int:
    # Segments are few (at most three here), a linear scan is enough.
    pts = spec.points
    last = max(0, spec.segment_count - 1)
    i = 0
    while i < last and arc_length > pts[i + 1].arc_length:
        i += 1
    return i


def _is_straight(p: StitchPoint) -> bool:
    return p.center_x == _NO_CENTER and p.center_y == _NO_CENTER


def _stored_radius(p: StitchPoint) -> float:
    # Signed radius recovered from the centre stored at construction.
    return (p.x - p.center_x) * math.sin(p.heading) + (p.center_y - p.y) * math.cos(p.heading)


def sample_at(arc_length: float, spec: TrajectorySpec) -> Point:
    """Position at *arc_length* along *spec*.

    Arc-lengths beyond the end extrapolate along the last segment's
    curvature.  A spec without segments always yields its start.  Whether
    a segment is straight or an arc follows what :func:`build_trajectory`
    stored, so both functions always take the same branch.
    """
    pts = spec.points
    if spec.segment_count < 1:
        return Point(pts[0].x, pts[0].y)

    i = _segment_index(arc_length, spec)
    p0, p1 = pts[i], pts[i + 1]
    du = p1.arc_length - p0.arc_length
    s = arc_length - p0.arc_length
    if du <= 0.0 or _is_straight(p0):
        return Point(
            p0.x + s * math.cos(p0.heading),
            p0.y + s * math.sin(p0.heading),
        )
    curv = (p1.heading - p0.heading) / du
    r = _stored_radius(p0)
    phi = p0.heading + curv * s
    return Point(
        p0.center_x + r * math.sin(phi),
        p0.center_y - r * math.cos(phi),
    )


def heading_toward(origin: Point, target: Point, fallback: float) -> float:
    """Heading of the vector *origin* → *target*, or *fallback* when the
    two points (nearly) coincide."""
    dx, dy = target.x - origin.x, target.y - origin.y
    if abs(dx) > 0.01 or abs(dy) > 0.01:
        return math.atan2(dy, dx)
    return fallback


def all_finite(values: Iterable[float]) -> bool:
    return all(math.isfinite(v) for v in values)

#!/usr/bin/env python3
"""
sim/vehicle.py
==============
Per-vehicle traffic-flow state machine.

A :class:`Vehicle` moves through

    APPROACHING → WAITING → CROSSING → EXITING → COMPLETED

driven by :meth:`Vehicle.update`, which the fleet coordinator calls once
per tick with the elapsed time, the current signal colours and a
read-only snapshot of every other vehicle.  A vehicle only ever mutates
its own fields.

Turning vehicles follow a precomputed :class:`~sim.trajectory.TrajectorySpec`
through the intersection; everything else moves by translating along its
heading.  Every failure path degrades to simpler motion instead of
raising, so a vehicle never ends a tick with an undefined pose.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from sim.intersection import IntersectionGeometry
from sim.physics import (
    advance,
    approach_ahead,
    approach_lateral,
    approach_speed,
    is_finite_xy,
)
from sim.traffic_policy import TrafficPolicy
from sim.trajectory import (
    TrajectorySpec,
    heading_toward,
    sample_at,
    straight_trajectory,
)
from sim.types import (
    Direction,
    LightColor,
    LightStateMap,
    TurnType,
    VehicleState,
)

log = logging.getLogger("vehicle")

# UI colour palette
VEHICLE_COLORS: Tuple[Tuple[int, int, int], ...] = (
    ( 86, 168, 255),
    (255,  88,  88),
    (100, 226, 170),
    (246, 191,  90),
    (180, 120, 255),
    (255, 160, 100),
)


def choose_turn(lane: int, rng: random.Random, straight_share: float = 0.7) -> TurnType:
    """Turn type allowed by *lane*: lane 0 always turns right, lane 1 goes
    straight with probability *straight_share* and otherwise turns left."""
    if lane == 0:
        return TurnType.RIGHT
    if rng.random() < straight_share:
        return TurnType.STRAIGHT
    return TurnType.LEFT


def light_for(light_states: Optional[LightStateMap], direction: Direction) -> Optional[LightColor]:
    """Signal colour for *direction*, or ``None`` when absent or unreadable."""
    if not light_states:
        return None
    raw = light_states.get(direction)
    if raw is None:
        return None
    try:
        return LightColor(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class VehicleSnapshot:
    """Read-only view of one vehicle, for renderers and for sibling checks."""

    id: int
    origin: Direction
    lane: int
    turn_type: TurnType
    x: float
    y: float
    heading: float
    speed: float
    state: VehicleState
    color: Tuple[int, int, int]
    wait_ms: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "heading": self.heading,
            "speed": self.speed,
            "state": self.state.value,
            "approach": self.origin.value,
            "lane": self.lane,
            "turn": self.turn_type.value,
            "color": self.color,
            "wait_ms": self.wait_ms,
        }


class Vehicle:
    """One vehicle negotiating the intersection.

    Parameters
    ----------
    vehicle_id : int
        Unique, monotonically assigned identifier.
    origin : Direction
        Side the vehicle enters from.
    lane : int
        ``0`` (right turns only) or ``1`` (straight / left).
    turn_type : TurnType
        Manoeuvre through the intersection.
    geometry : IntersectionGeometry
        Anchor points, footprint and turn paths.
    max_speed : float
        Cruising speed in units per second.
    policy : TrafficPolicy or None
        Tunable constants; uses defaults when *None*.
    color : tuple of int
        RGB colour tag for renderers.
    """

    def __init__(
        self,
        vehicle_id: int,
        origin: Direction,
        lane: int,
        turn_type: TurnType,
        geometry: IntersectionGeometry,
        max_speed: float,
        policy: Optional[TrafficPolicy] = None,
        color: Tuple[int, int, int] = VEHICLE_COLORS[0],
    ) -> None:
        self.id = vehicle_id
        self.origin = origin
        self.lane = lane
        self.turn_type = turn_type
        self.destination = geometry.destination(origin, turn_type)
        self.geometry = geometry
        self.policy = policy or TrafficPolicy()
        self.max_speed = max_speed
        self.color = color

        spawn = geometry.spawn_point(origin, lane)
        self.x = spawn.x
        self.y = spawn.y
        self.heading = geometry.initial_heading(origin)
        self.speed = 0.0

        self.state = VehicleState.APPROACHING
        self.wait_ms = 0.0
        self._wait_clock_running = False
        self.crossing_ms = 0.0
        self.entered_footprint = False

        self.trajectory: Optional[TrajectorySpec] = None
        self.trajectory_progress = 0.0
        self._kinematic_turn = False

    # ── queries ───────────────────────────────────────────────────────────

    def is_waiting(self) -> bool:
        return self.state == VehicleState.WAITING

    def is_completed(self) -> bool:
        return self.state == VehicleState.COMPLETED

    def as_snapshot(self) -> VehicleSnapshot:
        return VehicleSnapshot(
            id=self.id,
            origin=self.origin,
            lane=self.lane,
            turn_type=self.turn_type,
            x=self.x,
            y=self.y,
            heading=self.heading,
            speed=self.speed,
            state=self.state,
            color=self.color,
            wait_ms=self.wait_ms,
        )

    def __repr__(self) -> str:
        return (f"Vehicle(id={self.id}, {self.origin.value}/{self.lane} "
                f"{self.turn_type.value}, {self.state.value}, "
                f"x={self.x:.1f}, y={self.y:.1f}, v={self.speed:.1f})")

    # ── tick ──────────────────────────────────────────────────────────────

    def update(
        self,
        delta_ms: float,
        light_states: Optional[LightStateMap],
        siblings: Sequence[VehicleSnapshot] = (),
    ) -> None:
        """Advance this vehicle by *delta_ms* milliseconds.

        Parameters
        ----------
        delta_ms : float
            Elapsed simulation time.
        light_states : mapping or None
            Signal colour per approach; a missing entry means "proceed".
        siblings : sequence of VehicleSnapshot
            Positions of the other vehicles as of the start of this tick.
        """
        dt = delta_ms / 1000.0

        if not is_finite_xy(self.x, self.y) or not math.isfinite(self.heading):
            self._respawn()

        if self.state == VehicleState.APPROACHING:
            self._update_approaching(dt, light_states, siblings)
        elif self.state == VehicleState.WAITING:
            self._update_waiting(delta_ms, light_states, siblings)
        elif self.state == VehicleState.CROSSING:
            self._update_crossing(dt, delta_ms, siblings)
        elif self.state == VehicleState.EXITING:
            self._update_exiting(dt, siblings)
        elif self.state != VehicleState.COMPLETED:
            log.warning("Vehicle %s in unknown state %r, setting to EXITING",
                        self.id, self.state)
            self.state = VehicleState.EXITING

        # CROSSING positions itself; the other moving states translate here.
        if self.speed > 0 and self.state in (
            VehicleState.APPROACHING, VehicleState.WAITING, VehicleState.EXITING,
        ):
            self.x, self.y = advance(self.x, self.y, self.heading, self.speed * dt)

    def _respawn(self) -> None:
        log.error("Vehicle %s has invalid pose, resetting to spawn point", self.id)
        spawn = self.geometry.spawn_point(self.origin, self.lane)
        self.x, self.y = spawn.x, spawn.y
        self.heading = self.geometry.initial_heading(self.origin)
        self.state = VehicleState.APPROACHING
        self.speed = 0.0
        self.wait_ms = 0.0
        self._wait_clock_running = False
        self.crossing_ms = 0.0
        self.entered_footprint = False
        self.trajectory = None
        self.trajectory_progress = 0.0
        self._kinematic_turn = False

    # ── states ────────────────────────────────────────────────────────────

    def _update_approaching(
        self,
        dt: float,
        light_states: Optional[LightStateMap],
        siblings: Sequence[VehicleSnapshot],
    ) -> None:
        p = self.policy
        light = light_for(light_states, self.origin)
        to_stop = self.geometry.distance_to_stop_line(
            self.origin, self.x, self.y, p.vehicle_length,
        )
        blocked = self.leader_gap(siblings) < p.following_threshold

        if blocked or (to_stop <= p.stop_zone and light == LightColor.RED):
            self._enter_waiting(start_clock=not blocked)
            return

        if light == LightColor.RED and to_stop < p.red_brake_zone:
            self.speed = approach_speed(self.speed, 0.0, p.approach_accel, dt)
            if to_stop > p.stop_zone:
                # Creep up to the line so the queue forms at the stop zone.
                self.speed = max(self.speed, min(self.max_speed, p.restart_speed))
        else:
            self.speed = approach_speed(self.speed, self.max_speed, p.approach_accel, dt)
        self._hold_gap(dt, siblings)

        if self.geometry.contains(self.x, self.y):
            self._enter_crossing()

    def _update_waiting(
        self,
        delta_ms: float,
        light_states: Optional[LightStateMap],
        siblings: Sequence[VehicleSnapshot],
    ) -> None:
        p = self.policy
        self.speed = 0.0
        gap = self.leader_gap(siblings)

        if not self._wait_clock_running and gap >= p.following_threshold:
            self._wait_clock_running = True
        if self._wait_clock_running:
            self.wait_ms += delta_ms

        light = light_for(light_states, self.origin)
        may_go = light != LightColor.RED
        if may_go and gap >= p.release_gap:
            log.debug("Vehicle %s leaving queue (lane %d, light %s)",
                      self.id, self.lane, light.value if light else "none")
            self._release()
        elif self.wait_ms > p.wait_timeout_ms:
            log.warning("Vehicle %s waited %.0f ms, forcing it to proceed",
                        self.id, self.wait_ms)
            self._release()

    def _update_crossing(
        self,
        dt: float,
        delta_ms: float,
        siblings: Sequence[VehicleSnapshot],
    ) -> None:
        p = self.policy
        self.speed = approach_speed(
            self.speed, self.max_speed * p.crossing_speed_factor, p.crossing_accel, dt,
        )

        self._hold_gap(dt, siblings)

        if self.turn_type == TurnType.STRAIGHT or not self._reached_entry():
            self.x, self.y = advance(self.x, self.y, self.heading, self.speed * dt)
        else:
            self._follow_turn(dt)

        if self.geometry.contains(self.x, self.y):
            self.entered_footprint = True
        elif self.entered_footprint and self.crossing_ms > p.min_crossing_ms:
            log.debug("Vehicle %s exiting intersection at (%.1f, %.1f)",
                      self.id, self.x, self.y)
            self.state = VehicleState.EXITING

        self.crossing_ms += delta_ms

    def _update_exiting(self, dt: float, siblings: Sequence[VehicleSnapshot]) -> None:
        self.speed = self.max_speed
        self._hold_gap(dt, siblings)
        if self.geometry.outside_scene(self.x, self.y, self.policy.exit_margin):
            log.debug("Vehicle %s left the scene at (%.1f, %.1f)",
                      self.id, self.x, self.y)
            self.state = VehicleState.COMPLETED

    # ── transitions ───────────────────────────────────────────────────────

    def _enter_waiting(self, start_clock: bool) -> None:
        self.state = VehicleState.WAITING
        self.speed = 0.0
        if start_clock:
            self._wait_clock_running = True

    def _release(self) -> None:
        self.state = VehicleState.CROSSING
        self._wait_clock_running = False
        self.speed = self.policy.restart_speed

    def _enter_crossing(self) -> None:
        self.state = VehicleState.CROSSING
        log.debug("Vehicle %s entered the intersection (%s)", self.id, self.turn_type.value)

    # ── turning ───────────────────────────────────────────────────────────

    def _reached_entry(self) -> bool:
        """True once the vehicle is level with or past its path entry."""
        if self.trajectory is not None or self._kinematic_turn:
            return True
        entry = self.geometry.entry_point(self.origin)
        return approach_ahead(self.origin, self.x, self.y, entry.x, entry.y) <= 0.0

    def _follow_turn(self, dt: float) -> None:
        if self.trajectory is None and not self._kinematic_turn:
            self._init_trajectory()
        if self._kinematic_turn:
            self._kinematic_step(dt)
            return

        self.trajectory_progress += self.speed * dt
        pos = sample_at(self.trajectory_progress, self.trajectory)
        if not is_finite_xy(pos.x, pos.y):
            log.warning("Trajectory sample failed for vehicle %s, using fallback", self.id)
            self._use_fallback_trajectory()
            if self._kinematic_turn:
                self._kinematic_step(dt)
                return
            pos = sample_at(self.trajectory_progress, self.trajectory)

        self.x, self.y = pos.x, pos.y
        lookahead = max(self.policy.lookahead_min, self.speed * self.policy.lookahead_time_s)
        ahead = sample_at(self.trajectory_progress + lookahead, self.trajectory)
        if is_finite_xy(ahead.x, ahead.y):
            self.heading = heading_toward(pos, ahead, self.heading)

    def _init_trajectory(self) -> None:
        try:
            spec = self.geometry.build_path(self.origin, self.turn_type)
        except (ArithmeticError, ValueError):
            log.exception("Error creating trajectory for vehicle %s", self.id)
            spec = None
        if spec is None or not spec.is_finite():
            log.error("Failed to create trajectory for vehicle %s (%s → %s)",
                      self.id, self.origin.value, self.turn_type.value)
            self._use_fallback_trajectory()
            return
        self.trajectory = spec
        self.trajectory_progress = 0.0
        log.debug("Initialised %s trajectory for vehicle %s",
                  self.turn_type.value, self.id)

    def _use_fallback_trajectory(self) -> None:
        """Straight line from entry to exit; constant-rate turning if even
        that is unusable."""
        entry = self.geometry.entry_point(self.origin)
        exit_ = self.geometry.exit_point(self.origin, self.turn_type)
        try:
            spec = straight_trajectory(entry, exit_)
        except (ArithmeticError, ValueError):
            spec = None
        if spec is not None and spec.is_finite():
            log.warning("Using fallback trajectory for vehicle %s", self.id)
            self.trajectory = spec
            return
        log.warning("Fallback trajectory unusable for vehicle %s, turning kinematically",
                    self.id)
        self.trajectory = None
        self._kinematic_turn = True

    def _kinematic_step(self, dt: float) -> None:
        rate = self.speed / self.policy.fallback_turn_radius
        if self.turn_type == TurnType.LEFT:
            self.heading += rate * dt
        elif self.turn_type == TurnType.RIGHT:
            self.heading -= rate * dt
        self.x, self.y = advance(self.x, self.y, self.heading, self.speed * dt)

    # ── car following ─────────────────────────────────────────────────────

    def _hold_gap(self, dt: float, siblings: Sequence[VehicleSnapshot]) -> None:
        """Cap this tick's travel at the bumper gap to the leader."""
        if dt <= 0:
            return
        gap = self.leader_gap(siblings)
        if gap < self.speed * dt:
            self.speed = max(0.0, gap / dt)

    def leader_gap(self, siblings: Sequence[VehicleSnapshot]) -> float:
        """Bumper gap to the closest same-lane vehicle ahead, ``inf`` if none.

        Only vehicles from the same origin and lane that are still within
        one lane width of this vehicle's line of travel count.  The gap may
        be negative when two bodies already overlap.
        """
        best = math.inf
        for other in siblings:
            if other.id == self.id or other.state == VehicleState.COMPLETED:
                continue
            if other.origin != self.origin or other.lane != self.lane:
                continue
            ahead = approach_ahead(self.origin, self.x, self.y, other.x, other.y)
            if ahead <= 0.0:
                continue
            if approach_lateral(self.origin, self.x, self.y, other.x, other.y) \
                    > self.geometry.lane_width:
                continue
            best = min(best, ahead - self.policy.vehicle_length)
        return best

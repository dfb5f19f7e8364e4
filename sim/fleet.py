#!/usr/bin/env python3
"""
sim/fleet.py
============
Fleet coordinator: owns the active vehicles of one intersection.

Each :meth:`FleetCoordinator.tick` spawns vehicles on a timer, advances
every vehicle's state machine against a snapshot of the fleet taken at
the start of the tick, and reaps vehicles that have left the scene.
The coordinator is the only writer of the vehicle list.
"""

from __future__ import annotations

import itertools
import logging
import random
from typing import Any, Callable, Dict, List, Optional

from sim.intersection import IntersectionGeometry
from sim.settings import SimSettings
from sim.traffic_policy import TrafficPolicy
from sim.types import DIRECTIONS, LANES, Direction, LightStateMap, VehicleState
from sim.vehicle import VEHICLE_COLORS, Vehicle, VehicleSnapshot, choose_turn

log = logging.getLogger("fleet")


class FleetCoordinator:
    """Spawns, advances and reaps vehicles.

    Parameters
    ----------
    geometry : IntersectionGeometry or None
        Intersection layout; a default-sized one when *None*.
    settings : SimSettings or None
        Spawn rate and max speed; defaults from :mod:`config` when *None*.
    policy : TrafficPolicy or None
        Tunable constants shared with every vehicle.
    rng : random.Random or None
        Source of every random choice (direction, lane, turn, colour).
    seed : int or None
        Seed for a fresh ``random.Random`` when *rng* is not given.
    """

    def __init__(
        self,
        geometry: Optional[IntersectionGeometry] = None,
        settings: Optional[SimSettings] = None,
        policy: Optional[TrafficPolicy] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.geometry = geometry or IntersectionGeometry()
        self.settings = settings or SimSettings()
        self.policy = policy or TrafficPolicy()
        self._rng = rng or random.Random(seed)

        self.on_vehicle_completed: Optional[Callable[[Vehicle], None]] = None

        self._vehicles: List[Vehicle] = []
        self._ids = itertools.count(1)
        self._spawn_timer_ms = 0.0
        self._spawned = 0
        self._completed = 0
        self._rejected_spawns = 0
        self._completed_wait_ms = 0.0

    # ── lifecycle ─────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Drop every vehicle and restart ids, timers and counters."""
        self._vehicles = []
        self._ids = itertools.count(1)
        self._spawn_timer_ms = 0.0
        self._spawned = 0
        self._completed = 0
        self._rejected_spawns = 0
        self._completed_wait_ms = 0.0
        log.info("Fleet reset")

    def update_settings(self, settings: Optional[SimSettings] = None, **fields: Any) -> SimSettings:
        """Replace the running settings.

        Pass either a complete :class:`SimSettings` or individual fields
        (``spawn_rate=``, ``car_speed=``).  Invalid values raise
        :class:`pydantic.ValidationError` and leave the old settings active.
        """
        if settings is None:
            merged = self.settings.model_dump()
            merged.update(fields)
            settings = SimSettings(**merged)
        self.settings = settings
        log.info("Settings updated: spawn_rate=%.2f car_speed=%.1f",
                 settings.spawn_rate, settings.car_speed)
        return settings

    # ── tick ──────────────────────────────────────────────────────────────

    def tick(self, delta_ms: float, light_states: Optional[LightStateMap] = None) -> None:
        """Advance the whole fleet by *delta_ms* milliseconds."""
        self._spawn_timer_ms += delta_ms
        if self._spawn_timer_ms >= self.settings.spawn_interval_ms:
            self.spawn()
            self._spawn_timer_ms = 0.0

        siblings = [v.as_snapshot() for v in self._vehicles]
        for vehicle in self._vehicles:
            vehicle.max_speed = self.settings.car_speed
            vehicle.update(delta_ms, light_states, siblings)

        self._reap()

    def spawn(
        self,
        direction: Optional[Direction] = None,
        lane: Optional[int] = None,
    ) -> Optional[Vehicle]:
        """Try to add one vehicle; random direction / lane when not given.

        Returns the new vehicle, or *None* when a vehicle of the same
        direction and lane is still too close to the spawn anchor.
        """
        if direction is None:
            direction = self._rng.choice(DIRECTIONS)
        if lane is None:
            lane = self._rng.choice(LANES)

        anchor = self.geometry.spawn_point(direction, lane)
        min_spacing = self.policy.spawn_min_spacing
        for other in self._vehicles:
            if other.origin != direction or other.lane != lane:
                continue
            if (other.x - anchor.x) ** 2 + (other.y - anchor.y) ** 2 < min_spacing ** 2:
                self._rejected_spawns += 1
                log.debug("Spawn rejected on %s lane %d: vehicle %s too close",
                          direction.value, lane, other.id)
                return None

        vehicle = Vehicle(
            vehicle_id=next(self._ids),
            origin=direction,
            lane=lane,
            turn_type=choose_turn(lane, self._rng, self.policy.straight_share),
            geometry=self.geometry,
            max_speed=self.settings.car_speed,
            policy=self.policy,
            color=self._rng.choice(VEHICLE_COLORS),
        )
        self._vehicles.append(vehicle)
        self._spawned += 1
        log.debug("Spawned vehicle %s from %s in lane %d, turn %s",
                  vehicle.id, direction.value, lane, vehicle.turn_type.value)
        return vehicle

    def _reap(self) -> None:
        margin = self.policy.exit_margin
        keep: List[Vehicle] = []
        for vehicle in self._vehicles:
            if not vehicle.is_completed():
                keep.append(vehicle)
                continue
            if not self.geometry.outside_scene(vehicle.x, vehicle.y, margin):
                log.warning("Vehicle %s marked completed but still in the scene, keeping alive",
                            vehicle.id)
                vehicle.state = VehicleState.EXITING
                keep.append(vehicle)
                continue
            self._completed += 1
            self._completed_wait_ms += vehicle.wait_ms
            log.debug("Removing completed vehicle %s", vehicle.id)
            if self.on_vehicle_completed is not None:
                self.on_vehicle_completed(vehicle)
        self._vehicles = keep

    # ── queries ───────────────────────────────────────────────────────────

    def vehicles(self) -> List[VehicleSnapshot]:
        """Read-only snapshots of every active vehicle."""
        return [v.as_snapshot() for v in self._vehicles if not v.is_completed()]

    def waiting_vehicles(self, direction: Direction) -> List[VehicleSnapshot]:
        return [v.as_snapshot() for v in self._vehicles
                if v.origin == direction and v.is_waiting()]

    def waiting_counts(self) -> Dict[Direction, int]:
        """Number of queued vehicles per approach."""
        counts = {d: 0 for d in DIRECTIONS}
        for v in self._vehicles:
            if v.is_waiting():
                counts[v.origin] = counts.get(v.origin, 0) + 1
        return counts

    def vehicle_count(self) -> int:
        return len(self._vehicles)

    def stats(self) -> Dict[str, Any]:
        """Counters since the last reset."""
        mean_wait = (self._completed_wait_ms / self._completed) if self._completed else 0.0
        return {
            "active": len(self._vehicles),
            "spawned": self._spawned,
            "completed": self._completed,
            "rejected_spawns": self._rejected_spawns,
            "mean_wait_ms": mean_wait,
        }

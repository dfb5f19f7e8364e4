#!/usr/bin/env python3
"""
Behaviour tests for the per-vehicle traffic-flow state machine.
"""

from __future__ import annotations

import math
import random
import unittest

from sim.intersection import IntersectionGeometry
from sim.trajectory import build_trajectory
from sim.types import DIRECTIONS, Direction, LightColor, Point, Pose, TurnType, VehicleState
from sim.vehicle import Vehicle, VehicleSnapshot, choose_turn, light_for

_ALL_RED = {d: LightColor.RED for d in DIRECTIONS}
_NORTH_GREEN = {
    Direction.NORTH: LightColor.GREEN,
    Direction.SOUTH: LightColor.GREEN,
    Direction.EAST: LightColor.RED,
    Direction.WEST: LightColor.RED,
}


class _BrokenPathGeometry(IntersectionGeometry):
    """Turn paths come back with a NaN start."""

    def build_path(self, direction, turn_type):
        return build_trajectory(Pose(math.nan, 0.0, 0.0), [10.0], [0.0])


class _NoPathGeometry(IntersectionGeometry):
    """Neither the turn path nor the straight fallback is usable."""

    def build_path(self, direction, turn_type):
        raise ValueError("no path")

    def exit_point(self, direction, turn_type):
        return Point(math.nan, math.nan)


def _leader(x: float, y: float, origin: Direction = Direction.NORTH, lane: int = 1) -> VehicleSnapshot:
    return VehicleSnapshot(
        id=99,
        origin=origin,
        lane=lane,
        turn_type=TurnType.STRAIGHT,
        x=x,
        y=y,
        heading=math.pi / 2,
        speed=0.0,
        state=VehicleState.WAITING,
        color=(0, 0, 0),
    )


class TurnChoiceTests(unittest.TestCase):
    def test_lane_zero_always_turns_right(self) -> None:
        rng = random.Random(3)
        self.assertTrue(all(choose_turn(0, rng) == TurnType.RIGHT for _ in range(500)))

    def test_lane_one_splits_straight_and_left(self) -> None:
        rng = random.Random(11)
        turns = [choose_turn(1, rng) for _ in range(5000)]
        self.assertNotIn(TurnType.RIGHT, turns)
        share = turns.count(TurnType.STRAIGHT) / len(turns)
        self.assertGreater(share, 0.66)
        self.assertLess(share, 0.74)

    def test_light_for_is_permissive_on_bad_input(self) -> None:
        self.assertIsNone(light_for(None, Direction.NORTH))
        self.assertIsNone(light_for({Direction.EAST: LightColor.RED}, Direction.NORTH))
        self.assertIsNone(light_for({Direction.NORTH: "PURPLE"}, Direction.NORTH))
        self.assertEqual(light_for({Direction.NORTH: "RED"}, Direction.NORTH), LightColor.RED)


class VehicleStateMachineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.geo = IntersectionGeometry()

    def _vehicle(self, lane: int = 1, turn: TurnType = TurnType.STRAIGHT,
                 origin: Direction = Direction.NORTH, vid: int = 1) -> Vehicle:
        return Vehicle(vid, origin, lane, turn, self.geo, max_speed=40.0)

    def test_red_light_stops_vehicle_before_the_line(self) -> None:
        v = self._vehicle()
        for _ in range(4000):
            v.update(50.0, _ALL_RED)
            self.assertLessEqual(v.y + v.policy.vehicle_length / 2, 250.0 + 1e-9)
            if v.is_waiting():
                break
        self.assertEqual(v.state, VehicleState.WAITING)
        self.assertEqual(v.speed, 0.0)
        self.assertLessEqual(
            self.geo.distance_to_stop_line(v.origin, v.x, v.y, v.policy.vehicle_length),
            v.policy.stop_zone,
        )

    def test_waiting_vehicle_escapes_permanent_red(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.WAITING
        for _ in range(400):
            v.update(100.0, _ALL_RED)
            if v.state != VehicleState.WAITING:
                break
        self.assertEqual(v.state, VehicleState.CROSSING)
        self.assertGreater(v.wait_ms, 15_000.0)
        self.assertLessEqual(v.wait_ms, 15_100.0)

    def test_wait_clock_holds_while_blocked_by_leader(self) -> None:
        v = self._vehicle()
        leader = _leader(v.x, v.y + 30.0)  # gap of 10
        for _ in range(20):
            v.update(100.0, _ALL_RED, [leader])
        self.assertEqual(v.state, VehicleState.WAITING)
        self.assertEqual(v.wait_ms, 0.0)

    def test_leader_gap_ignores_other_lanes_and_vehicles_behind(self) -> None:
        v = self._vehicle()
        v.y = 100.0
        others = [
            _leader(v.x, 150.0, lane=0),
            _leader(v.x, 150.0, origin=Direction.SOUTH),
            _leader(v.x, 60.0),
        ]
        self.assertEqual(v.leader_gap(others), math.inf)
        self.assertAlmostEqual(v.leader_gap(others + [_leader(v.x, 140.0)]), 20.0)

    def test_north_lane_zero_turns_onto_east_heading(self) -> None:
        rng = random.Random(5)
        v = self._vehicle(lane=0, turn=choose_turn(0, rng))
        self.assertEqual(v.turn_type, TurnType.RIGHT)

        seen = set()
        for _ in range(4000):
            v.update(50.0, _NORTH_GREEN)
            seen.add(v.state)
            if v.state == VehicleState.EXITING:
                break

        self.assertIn(VehicleState.CROSSING, seen)
        self.assertNotIn(VehicleState.WAITING, seen)
        self.assertEqual(v.state, VehicleState.EXITING)
        target = self.geo.initial_heading(Direction.WEST)
        self.assertAlmostEqual(math.cos(v.heading - target), 1.0, places=4)

    def test_exiting_vehicle_completes_beyond_margin(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.EXITING
        for _ in range(4000):
            v.update(50.0, _NORTH_GREEN)
            if v.is_completed():
                break
        self.assertTrue(v.is_completed())
        self.assertGreater(v.y, self.geo.scene_height + v.policy.exit_margin)

    def test_follower_never_overlaps_leader(self) -> None:
        lead = self._vehicle(vid=1)
        follow = self._vehicle(vid=2)
        lead.y = 100.0
        follow.y = 70.0  # bumper gap of 10

        for _ in range(3000):
            siblings = [lead.as_snapshot(), follow.as_snapshot()]
            follow.update(50.0, _NORTH_GREEN, siblings)
            lead.update(50.0, _NORTH_GREEN, siblings)
            if lead.is_completed() or follow.is_completed():
                break
            gap = (lead.y - follow.y) - follow.policy.vehicle_length
            self.assertGreaterEqual(gap, -1e-6)

    def test_nan_pose_respawns(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.CROSSING
        v.x = math.nan
        v.update(50.0, _NORTH_GREEN)
        spawn = self.geo.spawn_point(Direction.NORTH, 1)
        self.assertEqual(v.state, VehicleState.APPROACHING)
        self.assertAlmostEqual(v.x, spawn.x)
        self.assertTrue(math.isfinite(v.y))

    def test_respawn_restarts_the_wait_clock(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.WAITING
        for _ in range(140):
            v.update(100.0, _ALL_RED)
        self.assertEqual(v.wait_ms, 14_000.0)

        v.x = math.nan
        v.update(100.0, _ALL_RED)
        self.assertEqual(v.state, VehicleState.APPROACHING)
        self.assertEqual(v.wait_ms, 0.0)

        # Back in the queue it must wait the full timeout again.
        waited_ticks = 0
        for _ in range(4000):
            v.update(100.0, _ALL_RED)
            if v.is_waiting():
                waited_ticks += 1
            elif waited_ticks:
                break
        self.assertEqual(v.state, VehicleState.CROSSING)
        self.assertGreater(waited_ticks * 100.0, v.policy.wait_timeout_ms)

    def test_leaving_the_box_too_soon_stays_crossing(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.CROSSING
        v.speed = 40.0
        v.entered_footprint = True
        v.y = 329.0  # just inside the bottom edge of the footprint

        v.update(50.0, _NORTH_GREEN)
        self.assertFalse(self.geo.contains(v.x, v.y))
        self.assertEqual(v.state, VehicleState.CROSSING)

        for _ in range(20):
            v.update(50.0, _NORTH_GREEN)
            if v.state == VehicleState.EXITING:
                break
        self.assertEqual(v.state, VehicleState.EXITING)
        self.assertGreater(v.crossing_ms, v.policy.min_crossing_ms)

    def test_released_upstream_is_not_flagged_exiting(self) -> None:
        v = self._vehicle()
        v.y = 100.0
        v.state = VehicleState.WAITING

        for _ in range(30):
            v.update(50.0, _NORTH_GREEN)

        self.assertEqual(v.state, VehicleState.CROSSING)
        self.assertFalse(v.entered_footprint)
        self.assertGreater(v.crossing_ms, v.policy.min_crossing_ms)
        self.assertLess(v.y, self.geo.cy - self.geo.road_width / 2)

    def test_red_brake_keeps_creep_speed_outside_stop_zone(self) -> None:
        p = self._vehicle().policy
        for max_speed in (5.0, 40.0):
            v = Vehicle(1, Direction.NORTH, 1, TurnType.STRAIGHT, self.geo, max_speed=max_speed)
            for _ in range(4000):
                before = self.geo.distance_to_stop_line(v.origin, v.x, v.y, p.vehicle_length)
                v.update(50.0, _ALL_RED)
                if v.is_waiting():
                    break
                if p.stop_zone < before < p.red_brake_zone:
                    self.assertGreaterEqual(v.speed, min(max_speed, p.restart_speed))
            self.assertEqual(v.state, VehicleState.WAITING, msg=f"max_speed={max_speed}")

    def test_unknown_state_becomes_exiting(self) -> None:
        v = self._vehicle()
        v.state = "BOGUS"
        v.update(50.0, _NORTH_GREEN)
        self.assertEqual(v.state, VehicleState.EXITING)

    def test_missing_light_lets_queue_go(self) -> None:
        v = self._vehicle()
        v.state = VehicleState.WAITING
        v.update(50.0, None)
        self.assertEqual(v.state, VehicleState.CROSSING)
        self.assertEqual(v.speed, v.policy.restart_speed)

    def test_unusable_path_falls_back_to_straight_line(self) -> None:
        geo = _BrokenPathGeometry()
        v = Vehicle(1, Direction.NORTH, 0, TurnType.RIGHT, geo, max_speed=40.0)
        entry = geo.entry_point(Direction.NORTH)
        v.x, v.y = entry.x, entry.y
        v.state = VehicleState.CROSSING
        v.speed = 10.0

        v.update(50.0, _NORTH_GREEN)

        self.assertIsNotNone(v.trajectory)
        self.assertTrue(v.trajectory.is_finite())
        exit_ = geo.exit_point(Direction.NORTH, TurnType.RIGHT)
        self.assertAlmostEqual(
            v.trajectory.total_length, math.hypot(exit_.x - entry.x, exit_.y - entry.y),
        )
        self.assertTrue(math.isfinite(v.x) and math.isfinite(v.y))

    def test_no_path_at_all_turns_kinematically(self) -> None:
        geo = _NoPathGeometry()
        v = Vehicle(1, Direction.NORTH, 0, TurnType.RIGHT, geo, max_speed=40.0)
        entry = geo.entry_point(Direction.NORTH)
        v.x, v.y = entry.x, entry.y
        v.state = VehicleState.CROSSING
        v.speed = 10.0

        for _ in range(5):
            v.update(50.0, _NORTH_GREEN)

        self.assertIsNone(v.trajectory)
        self.assertLess(v.heading, math.pi / 2)
        self.assertTrue(math.isfinite(v.x) and math.isfinite(v.y))

    def test_snapshot_dict_has_renderer_fields(self) -> None:
        d = self._vehicle().as_snapshot().as_dict()
        self.assertEqual(d["approach"], "NORTH")
        self.assertEqual(d["state"], "APPROACHING")
        for key in ("id", "x", "y", "heading", "speed", "lane", "turn", "color", "wait_ms"):
            self.assertIn(key, d)


if __name__ == "__main__":
    unittest.main()

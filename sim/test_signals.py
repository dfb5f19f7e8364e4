#!/usr/bin/env python3
"""
Tests for the fixed-cycle signal driver and the simulation bridge.
"""

from __future__ import annotations

import time
import unittest

from pydantic import ValidationError

from sim.signals import FixedCycleSignal
from sim.sim_bridge import SimBridge
from sim.types import Direction, LightColor


class FixedCycleSignalTests(unittest.TestCase):
    def test_phase_sequence(self) -> None:
        signal = FixedCycleSignal(green_s=10.0, yellow_s=3.0, all_red_s=1.0)
        colors = signal.colors()
        self.assertEqual(colors[Direction.NORTH], LightColor.GREEN)
        self.assertEqual(colors[Direction.SOUTH], LightColor.GREEN)
        self.assertEqual(colors[Direction.EAST], LightColor.RED)

        signal.tick(10.0)
        self.assertEqual(signal.colors()[Direction.NORTH], LightColor.YELLOW)
        signal.tick(3.0)
        self.assertTrue(all(c == LightColor.RED for c in signal.colors().values()))
        signal.tick(1.0)
        colors = signal.colors()
        self.assertEqual(colors[Direction.EAST], LightColor.GREEN)
        self.assertEqual(colors[Direction.WEST], LightColor.GREEN)
        self.assertEqual(colors[Direction.NORTH], LightColor.RED)

    def test_axes_never_open_together(self) -> None:
        signal = FixedCycleSignal(green_s=2.0, yellow_s=0.5, all_red_s=0.3, start_axis="EW")
        for _ in range(2000):
            signal.tick(0.05)
            c = signal.colors()
            ns_open = c[Direction.NORTH] != LightColor.RED
            ew_open = c[Direction.EAST] != LightColor.RED
            self.assertFalse(ns_open and ew_open)

    def test_reset_restores_start_axis(self) -> None:
        signal = FixedCycleSignal(start_axis="EW")
        signal.tick(100.0)
        signal.reset()
        self.assertEqual(signal.colors()[Direction.WEST], LightColor.GREEN)


class SimBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bridge = SimBridge(random_seed=4)

    def test_step_publishes_snapshot(self) -> None:
        self.bridge.update_settings(spawn_rate=50.0)
        for _ in range(50):
            self.bridge.step(0.1)

        stats = self.bridge.get_stats()
        self.assertAlmostEqual(stats["sim_time_s"], 5.0)
        self.assertGreater(stats["spawned"], 0)
        self.assertEqual(set(stats["waiting"]), {"NORTH", "EAST", "SOUTH", "WEST"})
        self.assertEqual(set(self.bridge.get_lights()), {"NORTH", "EAST", "SOUTH", "WEST"})
        for vehicle in self.bridge.get_vehicles():
            self.assertNotEqual(vehicle["state"], "COMPLETED")

    def test_intersection_description(self) -> None:
        info = self.bridge.get_intersection()
        self.assertEqual(info["scene"], (800.0, 600.0))
        self.assertEqual(info["center"], (400.0, 300.0))
        self.assertEqual(len(info["stop_lines"]["NORTH"]), 4)

    def test_settings_round_trip_through_bridge(self) -> None:
        self.bridge.update_settings(car_speed=55.0)
        self.assertEqual(self.bridge.get_settings().car_speed, 55.0)
        with self.assertRaises(ValidationError):
            self.bridge.update_settings(spawn_rate=1000.0)
        self.assertEqual(self.bridge.get_settings().car_speed, 55.0)

    def test_reset_clears_counters(self) -> None:
        self.bridge.update_settings(spawn_rate=50.0)
        for _ in range(20):
            self.bridge.step(0.1)
        self.bridge.reset()
        stats = self.bridge.get_stats()
        self.assertEqual(stats["spawned"], 0)
        self.assertEqual(stats["sim_time_s"], 0.0)
        self.assertEqual(self.bridge.get_vehicles(), [])

    def test_background_thread_advances_and_pauses(self) -> None:
        self.bridge.start()
        try:
            time.sleep(0.2)
            self.assertGreater(self.bridge.get_stats()["sim_time_s"], 0.0)
            self.bridge.set_paused(True)
            self.assertTrue(self.bridge.paused)
            time.sleep(0.05)
            frozen = self.bridge.get_stats()["sim_time_s"]
            time.sleep(0.1)
            self.assertEqual(self.bridge.get_stats()["sim_time_s"], frozen)
        finally:
            self.bridge.stop()


if __name__ == "__main__":
    unittest.main()

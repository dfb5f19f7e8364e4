#!/usr/bin/env python3
"""
main.py
=======
Entry point.  Builds a :class:`~sim.sim_bridge.SimBridge` from the
``CROSSING_*`` environment variables and either opens the pygame viewer
or, with ``CROSSING_HEADLESS=1``, steps the simulation for a fixed span
of simulated time and logs the counters.
"""

import os
import logging
from typing import Optional

import config
# Logging
from logging_setup import setup_logging
# Simulation
from sim.settings import SimSettings
from sim.sim_bridge import SimBridge


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger("main").warning("Ignoring %s=%r (not a number)", name, raw)
        return default


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logging.getLogger("main").warning("Ignoring %s=%r (not an integer)", name, raw)
        return None


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def run_headless(bridge: SimBridge, seconds: float, tick_hz: float) -> dict:
    """Step *bridge* synchronously for *seconds* of simulated time."""
    log = logging.getLogger("main")
    dt = 1.0 / tick_hz
    steps = int(seconds * tick_hz)
    for i in range(steps):
        bridge.step(dt)
        if (i + 1) % int(tick_hz * 10) == 0:
            stats = bridge.get_stats()
            log.info("t=%.0fs active=%d completed=%d waiting=%s",
                     stats["sim_time_s"], stats["active"],
                     stats["completed"], stats["waiting"])
    return bridge.get_stats()


def main():
    level_name = os.environ.get("CROSSING_LOG_LEVEL", "INFO").upper()
    setup_logging(getattr(logging, level_name, logging.INFO))
    log = logging.getLogger("main")

    settings = SimSettings(
        spawn_rate=_env_float("CROSSING_SPAWN_RATE", config.DEFAULT_SPAWN_RATE),
        car_speed=_env_float("CROSSING_CAR_SPEED", config.DEFAULT_CAR_SPEED),
    )
    tick_hz = max(1.0, _env_float("CROSSING_TICK_HZ", config.DEFAULT_TICK_RATE_HZ))
    bridge = SimBridge(
        tick_rate_hz=tick_hz,
        settings=settings,
        random_seed=_env_int("CROSSING_SEED"),
    )
    log.info("Starting simulation: spawn_rate=%.2f car_speed=%.1f tick=%.0f Hz",
             settings.spawn_rate, settings.car_speed, tick_hz)

    try:
        if _env_flag("CROSSING_HEADLESS"):
            seconds = _env_float("CROSSING_HEADLESS_SECONDS", config.DEFAULT_HEADLESS_SECONDS)
            stats = run_headless(bridge, seconds, tick_hz)
            log.info("Headless run finished: %s", stats)
        else:
            # Viewer
            from ui.pygame_view import run_pygame_view

            bridge.start()
            run_pygame_view(bridge, fps=config.TARGET_FPS)
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        bridge.stop()


if __name__ == "__main__":
    main()

"""
sim/sim_bridge.py
=================
Orchestrator tying :mod:`sim.fleet` and :mod:`sim.signals` together.
The simulation can be stepped synchronously with :meth:`SimBridge.step`
or run on a background thread; either way the viewer polls the bridge
for the latest snapshot without blocking.

Public API consumed by :mod:`ui.pygame_view`
--------------------------------------------
* ``get_vehicles()``          → ``List[dict]``
* ``get_lights()``            → ``Dict[str, str]``
* ``get_intersection()``      → ``dict``
* ``get_stats()``             → ``dict``
* ``get_settings()``          → ``SimSettings``
* ``update_settings(**kw)``   → ``SimSettings``
* ``reset()``                 → ``None``
* ``set_paused(bool)``        → ``None``
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import config
from sim.fleet import FleetCoordinator
from sim.intersection import IntersectionGeometry
from sim.settings import SimSettings
from sim.signals import FixedCycleSignal
from sim.traffic_policy import TrafficPolicy
from sim.types import DIRECTIONS

log = logging.getLogger("sim_bridge")


class SimBridge:
    """Simulation orchestrator.

    Every access to the coordinator goes through one lock, so the
    background thread and the UI thread never touch the vehicle list at
    the same time.  The UI only ever sees copies.

    Parameters
    ----------
    tick_rate_hz : float
        Simulation ticks per second for the background loop.
    settings : SimSettings or None
        Initial spawn rate and speed.
    random_seed : int or None
        Seed for reproducibility.
    policy : TrafficPolicy or None
        Tunable constants.
    geometry : IntersectionGeometry or None
        Intersection layout.
    signal : FixedCycleSignal or None
        Light driver; a default fixed cycle when *None*.
    """

    def __init__(
        self,
        tick_rate_hz: float = config.DEFAULT_TICK_RATE_HZ,
        settings: Optional[SimSettings] = None,
        random_seed: Optional[int] = None,
        policy: Optional[TrafficPolicy] = None,
        geometry: Optional[IntersectionGeometry] = None,
        signal: Optional[FixedCycleSignal] = None,
    ) -> None:
        self._tick_rate_hz = max(1.0, tick_rate_hz)
        self.geometry = geometry or IntersectionGeometry()
        self._fleet = FleetCoordinator(
            geometry=self.geometry,
            settings=settings,
            policy=policy,
            seed=random_seed,
        )
        self._signal = signal or FixedCycleSignal()

        self._lock = threading.Lock()

        # Cached state: written by the sim thread, read by the UI thread
        self._vehicles: List[Dict[str, Any]] = []
        self._lights: Dict[str, str] = {}
        self._stats: Dict[str, Any] = {}
        self._sim_time_s = 0.0

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._paused = False
        self._publish()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started at %.1f Hz", self._tick_rate_hz)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
        log.info("SimBridge stopped")

    # ── Viewer API ────────────────────────────────────────────────────────────

    def get_vehicles(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._vehicles)

    def get_lights(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._lights)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._stats)

    def get_intersection(self) -> Dict[str, Any]:
        """Geometry the viewer needs to draw the junction."""
        g = self.geometry
        return {
            "center": (g.cx, g.cy),
            "size": g.size,
            "road_width": g.road_width,
            "lane_width": g.lane_width,
            "scene": (g.scene_width, g.scene_height),
            "stop_lines": {d.value: tuple(g.stop_line(d)) for d in DIRECTIONS},
        }

    def get_settings(self) -> SimSettings:
        with self._lock:
            return self._fleet.settings

    def update_settings(self, **fields: Any) -> SimSettings:
        """Apply new spawn rate / speed without restarting.

        Raises :class:`pydantic.ValidationError` for invalid values.
        """
        with self._lock:
            return self._fleet.update_settings(**fields)

    def reset(self) -> None:
        """Clear every vehicle and restart the signal cycle."""
        with self._lock:
            self._fleet.reset()
            self._signal.reset()
            self._sim_time_s = 0.0
        self._publish()
        log.info("SimBridge reset")

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause the simulation tick."""
        self._paused = paused

    @property
    def paused(self) -> bool:
        return self._paused

    # ── Stepping ──────────────────────────────────────────────────────────────

    def step(self, dt_s: float) -> None:
        """Advance signals and fleet by *dt_s* seconds and refresh the cache."""
        with self._lock:
            self._signal.tick(dt_s)
            self._fleet.tick(dt_s * 1000.0, self._signal.colors())
            self._sim_time_s += dt_s
        self._publish()

    def _loop(self) -> None:
        dt = 1.0 / self._tick_rate_hz
        while self._running:
            t0 = time.perf_counter()
            if not self._paused:
                try:
                    self.step(dt)
                except Exception:
                    log.exception("SimBridge tick error")
            time.sleep(max(0.0, dt - (time.perf_counter() - t0)))

    def _publish(self) -> None:
        with self._lock:
            vehicles = [snap.as_dict() for snap in self._fleet.vehicles()]
            lights = {d.value: c.value for d, c in self._signal.colors().items()}
            waiting = {d.value: n for d, n in self._fleet.waiting_counts().items()}
            stats = self._fleet.stats()
            stats["sim_time_s"] = self._sim_time_s
            stats["waiting"] = waiting
            self._vehicles = vehicles
            self._lights = lights
            self._stats = stats

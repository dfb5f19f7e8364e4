#!/usr/bin/env python3
"""
sim/signals.py
==============
Fixed-cycle signal driver used by the runnable simulation.

The vehicle core only ever reads a ``LightStateMap``; this module is one
way to produce it.  The two axes alternate GREEN → YELLOW → all-RED
clearance, so at most one axis shows a non-red colour at any time.
"""

from __future__ import annotations

import logging
from typing import Dict

import config
from sim.types import DIRECTIONS, Direction, LightColor

log = logging.getLogger("signals")

_AXIS_APPROACHES: Dict[str, tuple] = {
    "NS": (Direction.NORTH, Direction.SOUTH),
    "EW": (Direction.EAST, Direction.WEST),
}
_OTHER_AXIS: Dict[str, str] = {"NS": "EW", "EW": "NS"}


class FixedCycleSignal:
    """Two-phase traffic light with yellow and all-red intervals.

    Parameters
    ----------
    green_s, yellow_s, all_red_s : float
        Phase durations in seconds.
    start_axis : str
        ``"NS"`` or ``"EW"`` — the axis that starts on green.
    """

    def __init__(
        self,
        green_s: float = config.SIGNAL_GREEN_S,
        yellow_s: float = config.SIGNAL_YELLOW_S,
        all_red_s: float = config.SIGNAL_ALL_RED_S,
        start_axis: str = "NS",
    ) -> None:
        self.green_s = max(0.1, green_s)
        self.yellow_s = max(0.1, yellow_s)
        self.all_red_s = max(0.1, all_red_s)
        self._start_axis = start_axis if start_axis in _AXIS_APPROACHES else "NS"
        self.reset()

    def reset(self) -> None:
        self.green_axis = self._start_axis
        self.phase = LightColor.GREEN
        self.timer_s = self.green_s

    def tick(self, dt_s: float) -> None:
        """Advance the phase clock by *dt_s* seconds."""
        self.timer_s -= dt_s
        while self.timer_s <= 0.0:
            if self.phase == LightColor.GREEN:
                self.phase = LightColor.YELLOW
                self.timer_s += self.yellow_s
            elif self.phase == LightColor.YELLOW:
                self.phase = LightColor.RED
                self.timer_s += self.all_red_s
            else:
                self.green_axis = _OTHER_AXIS[self.green_axis]
                self.phase = LightColor.GREEN
                self.timer_s += self.green_s
                log.debug("Green → %s", self.green_axis)

    def colors(self) -> Dict[Direction, LightColor]:
        """Current colour for every approach."""
        active = _AXIS_APPROACHES[self.green_axis]
        return {
            d: (self.phase if d in active else LightColor.RED)
            for d in DIRECTIONS
        }

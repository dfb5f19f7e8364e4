"""
sim/settings.py
===============
Runtime-adjustable simulation settings.

The coordinator accepts new settings while running; values are validated
here so a bad slider value or environment variable never reaches the
physics loop.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

import config


class SimSettings(BaseModel):
    """Spawn rate and speed applied to subsequently spawned / updated vehicles."""

    spawn_rate: float = Field(default=config.DEFAULT_SPAWN_RATE, gt=0.0, le=100.0)
    """Vehicles per ten seconds."""

    car_speed: float = Field(default=config.DEFAULT_CAR_SPEED, gt=0.0, le=500.0)
    """Maximum cruising speed in units per second."""

    @property
    def spawn_interval_ms(self) -> float:
        return 10_000.0 / self.spawn_rate

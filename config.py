#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf — it never imports from
other project packages.
"""

# ── Scene (shared with the render surface, y grows downward) ─────────────────
SCENE_WIDTH: int = 800
SCENE_HEIGHT: int = 600

# ── Intersection layout ──────────────────────────────────────────────────────
INTERSECTION_SIZE: float = 120.0
ROAD_WIDTH: float = 60.0
LANE_WIDTH: float = 15.0

# ── Vehicle body ─────────────────────────────────────────────────────────────
CAR_LENGTH: float = 20.0
CAR_WIDTH: float = 10.0

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_SPAWN_RATE: float = 4.0        # vehicles per 10 seconds
DEFAULT_CAR_SPEED: float = 40.0        # units per second
DEFAULT_TICK_RATE_HZ: float = 60.0
DEFAULT_HEADLESS_SECONDS: float = 120.0

# ── Fixed-cycle signal defaults ──────────────────────────────────────────────
SIGNAL_GREEN_S: float = 10.0
SIGNAL_YELLOW_S: float = 3.0
SIGNAL_ALL_RED_S: float = 1.0

# ── UI defaults ──────────────────────────────────────────────────────────────
TARGET_FPS: int = 60

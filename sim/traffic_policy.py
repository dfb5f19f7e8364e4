#!/usr/bin/env python3
"""
sim/traffic_policy.py
=====================
Tunable kinematic, queueing and spawn parameters for the intersection
simulation.  Every constant lives in the frozen :class:`TrafficPolicy`
dataclass so that experiments can swap policies without touching code.

Distances are scene units, speeds units per second, accelerations units
per second squared, durations milliseconds.
"""

from __future__ import annotations

from dataclasses import dataclass

import config


@dataclass(frozen=True)
class TrafficPolicy:
    """Immutable bag of every tunable vehicle / fleet parameter.

    Groups: vehicle body, approach, queueing, crossing, exit, spawn.
    """

    # ── Vehicle body ──────────────────────────────────────────────────────
    vehicle_length: float = config.CAR_LENGTH
    """Bumper-to-bumper length, subtracted from centre spacing for gaps."""

    vehicle_width: float = config.CAR_WIDTH

    # ── Approach ──────────────────────────────────────────────────────────
    approach_accel: float = 30.0
    """Acceleration and braking rate while approaching."""

    red_brake_zone: float = 40.0
    """Start braking for a red light this far before the stop line."""

    stop_zone: float = 15.0
    """Within this distance of the stop line a red light means stop."""

    following_threshold: float = 25.0
    """A leader closer than this puts the follower into the queue."""

    # ── Queueing ──────────────────────────────────────────────────────────
    release_gap: float = 20.0
    """A waiting vehicle leaves the queue only once its leader is this far."""

    restart_speed: float = 10.0
    """Speed given to a vehicle the moment it leaves the queue."""

    wait_timeout_ms: float = 15_000.0
    """Accumulated wait after which a queued vehicle proceeds regardless."""

    # ── Crossing ──────────────────────────────────────────────────────────
    crossing_speed_factor: float = 1.2
    """Crossing speed cap as a multiple of the vehicle's max speed."""

    crossing_accel: float = 40.0

    min_crossing_ms: float = 500.0
    """Minimum time in CROSSING before the vehicle may be flagged as exiting."""

    lookahead_min: float = 2.0
    """Smallest arc-length lookahead used to derive heading on a trajectory."""

    lookahead_time_s: float = 0.1
    """Lookahead grows with speed: ``speed * lookahead_time_s``."""

    fallback_turn_radius: float = 20.0
    """Radius of the constant-rate turn used when no trajectory is usable."""

    # ── Exit ──────────────────────────────────────────────────────────────
    exit_margin: float = 100.0
    """How far beyond the scene edge a vehicle must travel to be done."""

    # ── Spawn ─────────────────────────────────────────────────────────────
    spawn_min_spacing: float = 60.0
    """No spawn when a same-lane vehicle is this close to the anchor."""

    straight_share: float = 0.7
    """Probability that a lane-1 vehicle goes straight rather than left."""

"""
sim — Simulation core
=====================

Modules
-------
types
    Direction / turn / light / state enums and small value types.
trajectory
    Piecewise-arc trajectory construction and sampling.
intersection
    :class:`IntersectionGeometry` anchor points and turn paths.
vehicle
    :class:`Vehicle` per-vehicle traffic-flow state machine.
fleet
    :class:`FleetCoordinator` spawn / advance / reap loop.
traffic_policy
    :class:`TrafficPolicy` tunable constants.
settings
    :class:`SimSettings` runtime-adjustable spawn rate and speed.
signals
    :class:`FixedCycleSignal` light driver for the runnable simulation.
sim_bridge
    :class:`SimBridge` tick-loop orchestrator for the viewer.
physics
    Low-level kinematics helpers.
"""

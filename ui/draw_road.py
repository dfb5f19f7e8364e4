"""
ui/draw_road.py
===============
Renders the static junction: road surfaces, intersection box, dashed
lane markings, stop lines, and one signal head per approach.

All methods are *pure renderers*: they read the intersection dict
published by :class:`~sim.sim_bridge.SimBridge` and draw to a surface.
"""

from __future__ import annotations

from typing import Any, Mapping

import pygame


class RoadRenderer:
    """Mixin that draws roads, markings, stop lines and signal heads."""

    def draw_road(self, surface: pygame.Surface, intersection: Mapping[str, Any]) -> None:
        cx, cy = intersection["center"]
        width, height = intersection["scene"]
        road = intersection["road_width"]
        half = road / 2

        pygame.draw.rect(surface, self.ROAD_COLOR, pygame.Rect(int(cx - half), 0, int(road), int(height)))
        pygame.draw.rect(surface, self.ROAD_COLOR, pygame.Rect(0, int(cy - half), int(width), int(road)))
        pygame.draw.rect(
            surface, self.BOX_COLOR,
            pygame.Rect(int(cx - half), int(cy - half), int(road), int(road)),
        )

    def draw_lane_markings(self, surface: pygame.Surface, intersection: Mapping[str, Any]) -> None:
        cx, cy = intersection["center"]
        width, height = intersection["scene"]
        half = intersection["road_width"] / 2
        lane = intersection["lane_width"]

        for offset in (-lane / 2, 0.0, lane / 2):
            x = cx + offset
            self._dashed(surface, (x, 0), (x, cy - half))
            self._dashed(surface, (x, cy + half), (x, height))
            y = cy + offset
            self._dashed(surface, (0, y), (cx - half, y))
            self._dashed(surface, (cx + half, y), (width, y))

    def draw_stop_lines(self, surface: pygame.Surface, intersection: Mapping[str, Any]) -> None:
        for x1, y1, x2, y2 in intersection["stop_lines"].values():
            pygame.draw.line(surface, self.STOP_LINE_COLOR, (x1, y1), (x2, y2), 4)

    def draw_lights(
        self,
        surface: pygame.Surface,
        intersection: Mapping[str, Any],
        lights: Mapping[str, str],
    ) -> None:
        cx, cy = intersection["center"]
        for approach, (ox, oy) in self.LIGHT_OFFSETS.items():
            x, y = int(cx + ox), int(cy + oy)
            housing = pygame.Rect(x, y, 16, 42)
            pygame.draw.rect(surface, self.LIGHT_HOUSING_COLOR, housing, border_radius=3)
            current = lights.get(approach)
            for i, name in enumerate(("RED", "YELLOW", "GREEN")):
                color = self.LIGHT_COLORS[name] if current == name else self.LIGHT_OFF_COLOR
                pygame.draw.circle(surface, color, (x + 8, y + 7 + i * 13), 5)

    def _dashed(self, surface: pygame.Surface, start, end) -> None:
        a = pygame.Vector2(start)
        b = pygame.Vector2(end)
        length = a.distance_to(b)
        if length <= 0:
            return
        step = (b - a) / length
        pos = 0.0
        while pos < length:
            seg_end = min(length, pos + self.DASH_LEN)
            pygame.draw.line(surface, self.LANE_DASH_COLOR, a + step * pos, a + step * seg_end, 2)
            pos += self.DASH_LEN + self.DASH_GAP

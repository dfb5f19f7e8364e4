#!/usr/bin/env python3
"""Vehicle sprite rendering (mixin)."""

from __future__ import annotations

import math
from typing import Any, Mapping

import pygame

import config


class VehicleRenderer:
    """Mixin that draws one rotated sprite per vehicle snapshot."""

    def draw_vehicle(self, surface: pygame.Surface, vehicle: Mapping[str, Any]) -> None:
        x, y = vehicle.get("x"), vehicle.get("y")
        if x is None or y is None or not (math.isfinite(x) and math.isfinite(y)):
            return

        w, h = int(config.CAR_LENGTH), int(config.CAR_WIDTH)
        sprite = pygame.Surface((w, h), pygame.SRCALPHA)

        # Body
        body = pygame.Rect(0, 0, w, h)
        color = tuple(vehicle.get("color", (200, 200, 200)))
        pygame.draw.rect(sprite, color, body, border_radius=2)

        # Windshield and rear window
        pygame.draw.rect(sprite, (51, 51, 51), pygame.Rect(w - 6, 2, 3, h - 4))
        pygame.draw.rect(sprite, (51, 51, 51), pygame.Rect(2, 2, 3, h - 4))

        outline = self.STATE_OUTLINE.get(vehicle.get("state", ""))
        if outline is not None:
            pygame.draw.rect(sprite, outline, body, width=1, border_radius=2)

        # pygame rotates counter-clockwise on screen; headings grow clockwise.
        angle = -math.degrees(vehicle.get("heading", 0.0))
        rotated = pygame.transform.rotate(sprite, angle)
        dest = rotated.get_rect(center=(int(x), int(y)))
        surface.blit(rotated, dest)

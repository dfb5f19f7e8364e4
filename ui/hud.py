#!/usr/bin/env python3
"""HUD panel, legend and pause banner (mixin)."""

from __future__ import annotations

from typing import Any, Mapping

import pygame


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Main HUD panel                                                      #
    # ------------------------------------------------------------------ #

    def draw_hud(
        self,
        surface: pygame.Surface,
        stats: Mapping[str, Any],
        settings: Any,
    ) -> None:
        if self.font_small is None or self.font_tiny is None:
            return

        waiting = stats.get("waiting", {})
        lines = [
            f"VEHICLES {stats.get('active', 0)}   DONE {stats.get('completed', 0)}",
            f"spawned {stats.get('spawned', 0)}   rejected {stats.get('rejected_spawns', 0)}",
            f"mean wait {stats.get('mean_wait_ms', 0.0) / 1000.0:.1f} s",
            "queue  " + "  ".join(f"{d[0]}:{n}" for d, n in waiting.items()),
            f"spawn rate {settings.spawn_rate:.1f}/10s   speed {settings.car_speed:.0f}",
            f"t = {stats.get('sim_time_s', 0.0):.1f} s",
        ]

        panel_rect = pygame.Rect(12, 12, 250, 16 + 18 * len(lines))
        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel_rect, border_radius=6)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, panel_rect, width=1, border_radius=6)

        y = panel_rect.y + 8
        for i, line in enumerate(lines):
            font = self.font_small if i == 0 else self.font_tiny
            surface.blit(font.render(line, True, self.HUD_TEXT_COLOR), (panel_rect.x + 10, y))
            y += 18

    def _draw_legend(self, surface: pygame.Surface) -> None:
        if self.font_tiny is None:
            return
        x = self.width - 130
        y = 14
        for label, color in self.LEGEND_ITEMS:
            pygame.draw.rect(surface, color, pygame.Rect(x, y + 3, 10, 10), width=1)
            surface.blit(self.font_tiny.render(label, True, self.HUD_TEXT_COLOR), (x + 16, y))
            y += 18
        hint = self.font_tiny.render("SPACE R +/- UP/DOWN", True, self.HUD_DIM_COLOR)
        surface.blit(hint, (x - 40, y + 4))

    def _draw_pause_banner(self, surface: pygame.Surface) -> None:
        if self.font_title is None:
            return
        text = self.font_title.render("PAUSED", True, (255, 255, 255))
        rect = text.get_rect(center=(self.width // 2, 40))
        pygame.draw.rect(surface, self.HUD_BG_COLOR, rect.inflate(24, 12), border_radius=6)
        surface.blit(text, rect)

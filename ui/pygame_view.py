#!/usr/bin/env python3
"""
Main view class — combines all UI mixins into one runnable Pygame window.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, ColorRGBA
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── draw_road.py       – RoadRenderer mixin (roads, markings, stop lines, lights)
    ├── draw_vehicles.py   – VehicleRenderer mixin (rotated sprites)
    ├── hud.py             – HudRenderer mixin  (HUD, legend, pause banner)
    └── pygame_view.py     – PygameIntersectionView (this file – main loop)

The view never touches the simulation directly: it reads copies from a
:class:`~sim.sim_bridge.SimBridge` and forwards key presses as settings
changes.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Optional

import pygame
from pydantic import ValidationError

from .constants import ViewConstants
from .draw_road import RoadRenderer
from .draw_vehicles import VehicleRenderer
from .hud import HudRenderer

log = logging.getLogger("ui")


class PygameIntersectionView(
    ViewConstants,
    RoadRenderer,
    VehicleRenderer,
    HudRenderer,
):
    """Signalized-intersection visualiser powered by Pygame.

    Inherits drawing logic from focused mixin modules so each file
    stays small and single-purpose.
    """

    def __init__(self, bridge: Any, fps: int = 60):
        self.bridge = bridge
        intersection = bridge.get_intersection()
        self.width, self.height = (int(v) for v in intersection["scene"])
        self.fps = fps

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None

        self.paused = False
        self.show_legend = True

    @staticmethod
    def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
        return pygame.font.SysFont("consolas,dejavusansmono,monospace", size, bold=bold)

    # ------------------------------------------------------------------ #
    #  Screenshot                                                          #
    # ------------------------------------------------------------------ #
    def _take_screenshot(self) -> None:
        if self.screen is None:
            return
        os.makedirs(self.SCREENSHOT_DIR, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(self.SCREENSHOT_DIR, f"sim_{stamp}.png")
        pygame.image.save(self.screen, path)
        log.info("Screenshot saved to %s", path)

    # ------------------------------------------------------------------ #
    #  Settings                                                            #
    # ------------------------------------------------------------------ #
    def _nudge_setting(self, name: str, delta: float) -> None:
        current = getattr(self.bridge.get_settings(), name)
        try:
            self.bridge.update_settings(**{name: current + delta})
        except ValidationError:
            log.info("Ignoring out-of-range %s=%.1f", name, current + delta)

    # ------------------------------------------------------------------ #
    #  Main loop                                                           #
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("SIGNALIZED INTERSECTION SIM")
        self.screen = pygame.display.set_mode((self.width, self.height))
        self.clock = pygame.time.Clock()
        self.font_small = self._load_font(13, bold=True)
        self.font_tiny = self._load_font(11, bold=False)
        self.font_title = self._load_font(28, bold=True)

        intersection = self.bridge.get_intersection()

        running = True
        while running:
            self.clock.tick(self.fps)

            # ---- events ------------------------------------------------- #
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        self.paused = not self.paused
                        self.bridge.set_paused(self.paused)
                    elif event.key == pygame.K_l:
                        self.show_legend = not self.show_legend
                    elif event.key == pygame.K_r:
                        self.paused = False
                        self.bridge.reset()
                        self.bridge.set_paused(False)
                    elif event.key == pygame.K_F12:
                        self._take_screenshot()
                    elif event.key in (pygame.K_EQUALS, pygame.K_PLUS):
                        self._nudge_setting("spawn_rate", 1.0)
                    elif event.key == pygame.K_MINUS:
                        self._nudge_setting("spawn_rate", -1.0)
                    elif event.key == pygame.K_UP:
                        self._nudge_setting("car_speed", 5.0)
                    elif event.key == pygame.K_DOWN:
                        self._nudge_setting("car_speed", -5.0)

            vehicles = self.bridge.get_vehicles()
            lights = self.bridge.get_lights()
            stats = self.bridge.get_stats()

            # ---- render ------------------------------------------------- #
            self.screen.fill(self.BG_COLOR)
            self.draw_road(self.screen, intersection)
            self.draw_lane_markings(self.screen, intersection)
            self.draw_stop_lines(self.screen, intersection)
            self.draw_lights(self.screen, intersection, lights)

            for vehicle in vehicles:
                self.draw_vehicle(self.screen, vehicle)

            self.draw_hud(self.screen, stats, self.bridge.get_settings())
            if self.show_legend:
                self._draw_legend(self.screen)
            if self.paused:
                self._draw_pause_banner(self.screen)

            pygame.display.flip()

        pygame.quit()


# ---------------------------------------------------------------------- #
#  Convenience entry point                                                 #
# ---------------------------------------------------------------------- #
def run_pygame_view(bridge: Any, fps: int = 60) -> None:
    view = PygameIntersectionView(bridge=bridge, fps=fps)
    view.run()


if __name__ == "__main__":
    raise SystemExit(
        "pygame_view.py needs a bridge object. Run `python main.py` "
        "or call run_pygame_view(your_bridge)."
    )

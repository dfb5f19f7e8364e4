#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .types import ColorRGB


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = (46, 92, 52)
    ROAD_COLOR: ColorRGB = (68, 68, 68)
    BOX_COLOR: ColorRGB = (102, 102, 102)
    LANE_DASH_COLOR: ColorRGB = (235, 235, 235)
    STOP_LINE_COLOR: ColorRGB = (255, 255, 255)
    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    HUD_TEXT_COLOR: ColorRGB = (200, 200, 200)
    HUD_DIM_COLOR: ColorRGB = (120, 120, 120)

    LIGHT_COLORS: Dict[str, ColorRGB] = {
        "RED": (230, 50, 50),
        "YELLOW": (245, 200, 40),
        "GREEN": (40, 210, 90),
    }
    LIGHT_OFF_COLOR: ColorRGB = (40, 40, 40)
    LIGHT_HOUSING_COLOR: ColorRGB = (18, 18, 18)

    # Offset of each signal head from the intersection centre (scene units)
    LIGHT_OFFSETS: Dict[str, Tuple[float, float]] = {
        "NORTH": (-50.0, -140.0),
        "EAST": (110.0, -50.0),
        "SOUTH": (50.0, 110.0),
        "WEST": (-140.0, 50.0),
    }

    DASH_LEN = 10
    DASH_GAP = 10

    STATE_OUTLINE: Dict[str, ColorRGB] = {
        "WAITING": (255, 60, 60),
        "CROSSING": (255, 220, 80),
    }

    LEGEND_ITEMS: Sequence[Tuple[str, ColorRGB]] = (
        ("WAITING", (255, 60, 60)),
        ("CROSSING", (255, 220, 80)),
    )

    SCREENSHOT_DIR = "screenshots"

"""
ui/types.py
===========
Colour aliases shared by every UI module.
"""

from __future__ import annotations
from typing import Tuple

ColorRGB = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]

"""Display tint colours selectable from the command line."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

OFF_COLOR = 0x000000


class Color(Enum):
    PURPLE = 0xAF12E8
    GREEN = 0x008000
    RED = 0xFF0000
    BLUE = 0x0000FF

    @classmethod
    def from_name(cls, name: str) -> "Color":
        """Case-insensitive lookup; unknown names fall back to purple."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return cls.PURPLE

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return hex_to_rgb(self.value)


def hex_to_rgb(value: int) -> Tuple[int, int, int]:
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


COLOR_NAMES = tuple(color.name.lower() for color in Color)

__all__ = ["Color", "COLOR_NAMES", "OFF_COLOR", "hex_to_rgb"]

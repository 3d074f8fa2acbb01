"""Display subsystem for the CHIP-8 virtual machine."""

from .font import FONT_GLYPHS, glyph_address, glyph_rows
from .framebuffer import DisplayBuffer
from .palette import COLOR_NAMES, Color
from .renderer import DisplayRenderer

__all__ = [
    "DisplayBuffer",
    "DisplayRenderer",
    "Color",
    "COLOR_NAMES",
    "FONT_GLYPHS",
    "glyph_address",
    "glyph_rows",
]

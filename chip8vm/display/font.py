"""Built-in hexadecimal font used by the ``LD F, Vx`` instruction."""

from __future__ import annotations

from typing import Tuple

from ..constants import FONT_BASE, GLYPH_COUNT, GLYPH_HEIGHT

# Sixteen 4x5 glyphs for 0-F, one byte per row (high nibble used).
FONT_GLYPHS: Tuple[int, ...] = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)

FONT_SIZE = len(FONT_GLYPHS)


def glyph_address(digit: int, base: int = FONT_BASE) -> int:
    """Return the memory address of the glyph for a hex digit."""
    if not (0 <= digit < GLYPH_COUNT):
        raise ValueError(f"Glyph index out of range: {digit}")
    return base + digit * GLYPH_HEIGHT


def glyph_rows(digit: int) -> Tuple[int, ...]:
    """Return the five row bytes of a glyph."""
    offset = glyph_address(digit, base=0)
    return FONT_GLYPHS[offset : offset + GLYPH_HEIGHT]

"""Monochrome 64x32 display buffer with the XOR sprite blit."""

from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from ..constants import DISPLAY_HEIGHT, DISPLAY_WIDTH, SPRITE_WIDTH


class DisplayBuffer:
    """Pixel grid indexed ``[y, x]``; coordinates wrap on both axes."""

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width), dtype=bool)
        self.dirty = False
        self.draw_count = 0

    def clear(self) -> None:
        self._pixels[:, :] = False
        self.dirty = True

    def pixel(self, x: int, y: int) -> bool:
        return bool(self._pixels[y % self.height, x % self.width])

    def set_pixel(self, x: int, y: int, value: bool) -> None:
        self._pixels[y % self.height, x % self.width] = value
        self.dirty = True

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """XOR an 8-pixel-wide sprite at ``(x, y)``.

        Returns True when any pixel went from on to off anywhere in the
        sprite.
        """
        collision = False
        for row_idx, row in enumerate(rows):
            py = (y + row_idx) % self.height
            for col in range(SPRITE_WIDTH):
                if not (row >> (SPRITE_WIDTH - 1 - col)) & 1:
                    continue
                px = (x + col) % self.width
                if self._pixels[py, px]:
                    collision = True
                self._pixels[py, px] = not self._pixels[py, px]
        self.dirty = True
        self.draw_count += 1
        return collision

    def to_array(self) -> np.ndarray:
        return self._pixels.copy()

    def rows_as_ints(self) -> Tuple[int, ...]:
        """Each row packed into an int, bit ``width-1-x`` for column ``x``."""
        packed = []
        for row in self._pixels:
            value = 0
            for bit in row:
                value = (value << 1) | int(bit)
            packed.append(value)
        return tuple(packed)

    def lit_count(self) -> int:
        return int(self._pixels.sum())

    def render_text(self, on: str = "#", off: str = ".") -> str:
        return "\n".join(
            "".join(on if bit else off for bit in row) for row in self._pixels
        )


__all__ = ["DisplayBuffer"]

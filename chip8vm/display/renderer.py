"""Display rendering utilities (Pillow)."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from .framebuffer import DisplayBuffer
from .palette import OFF_COLOR, Color, hex_to_rgb


class DisplayRenderer:
    """Renders the display buffer to scaled RGB images."""

    def __init__(
        self,
        scale: int = 8,
        fg_color: Tuple[int, int, int] = Color.PURPLE.rgb,
        bg_color: Tuple[int, int, int] = hex_to_rgb(OFF_COLOR),
    ):
        if scale < 1:
            raise ValueError(f"Scale must be positive: {scale}")
        self.scale = scale
        self.fg_color = fg_color
        self.bg_color = bg_color

    def render_display(self, display: DisplayBuffer) -> Image.Image:
        buffer = display.to_array()
        rgb = np.empty((display.height, display.width, 3), dtype=np.uint8)
        rgb[:, :] = self.bg_color
        rgb[buffer] = self.fg_color
        # Nearest-neighbour upscale keeps pixels square.
        rgb = rgb.repeat(self.scale, axis=0).repeat(self.scale, axis=1)
        return Image.fromarray(rgb)

    def save_display(self, display: DisplayBuffer, filename: Union[str, Path]) -> Path:
        target = Path(filename)
        self.render_display(display).save(target)
        return target


__all__ = ["DisplayRenderer"]

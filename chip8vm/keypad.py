"""Sixteen-key hexadecimal keypad latch."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .constants import NUM_KEYS
from .errors import OutOfBoundsAccess


def _build_key_layout() -> Dict[str, int]:
    """Map physical key names onto keypad indices.

    The left 4x4 block of a QWERTY keyboard stands in for the hex pad::

        1 2 3 4      1 2 3 C
        Q W E R  ->  4 5 6 D
        A S D F      7 8 9 E
        Z X C V      A 0 B F
    """

    physical: List[List[str]] = [
        ["1", "2", "3", "4"],
        ["Q", "W", "E", "R"],
        ["A", "S", "D", "F"],
        ["Z", "X", "C", "V"],
    ]
    hexpad: List[List[int]] = [
        [0x1, 0x2, 0x3, 0xC],
        [0x4, 0x5, 0x6, 0xD],
        [0x7, 0x8, 0x9, 0xE],
        [0xA, 0x0, 0xB, 0xF],
    ]

    layout: Dict[str, int] = {}
    for keys, indices in zip(physical, hexpad):
        for name, index in zip(keys, indices):
            layout[name] = index
    return layout


KEY_LAYOUT = _build_key_layout()


class Keypad:
    """Pressed/released latch fed by the host input adapter."""

    def __init__(self) -> None:
        self._keys: List[bool] = [False] * NUM_KEYS
        self.press_count = 0

    def set(self, index: int, pressed: bool) -> None:
        self._check(index)
        if pressed and not self._keys[index]:
            self.press_count += 1
        self._keys[index] = bool(pressed)

    def is_pressed(self, index: int) -> bool:
        self._check(index)
        return self._keys[index]

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed key index, or None when nothing is held."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def pressed_keys(self) -> Tuple[int, ...]:
        return tuple(index for index, pressed in enumerate(self._keys) if pressed)

    def release_all(self) -> None:
        self._keys = [False] * NUM_KEYS

    @staticmethod
    def _check(index: int) -> None:
        if not 0 <= index < NUM_KEYS:
            raise OutOfBoundsAccess(f"Key index out of range: {index}")


__all__ = ["Keypad", "KEY_LAYOUT"]

"""Flat CHIP-8 memory with the font table and program loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .constants import FONT_BASE, MEMORY_SIZE, PROGRAM_START
from .display.font import FONT_GLYPHS, FONT_SIZE
from .errors import OutOfBoundsAccess, ProgramLoadError

logger = logging.getLogger(__name__)


def check_layout(
    *, font_base: int, program_start: int, size: int = MEMORY_SIZE
) -> None:
    """Raise ValueError unless the font and the program region both fit in
    memory without overlapping. The program region runs to the end of memory.
    """
    if not 0 <= font_base <= size - FONT_SIZE:
        raise ValueError(
            f"font_base 0x{font_base:X} leaves no room for the {FONT_SIZE}-byte font"
        )
    if not 0 <= program_start < size:
        raise ValueError(f"program_start 0x{program_start:X} outside memory")
    if font_base + FONT_SIZE > program_start:
        raise ValueError(
            f"Font at 0x{font_base:03X} overlaps the program region at 0x{program_start:03X}"
        )


class Chip8Memory:
    """Byte-addressable memory; every access is range checked."""

    def __init__(
        self,
        *,
        size: int = MEMORY_SIZE,
        font_base: int = FONT_BASE,
        program_start: int = PROGRAM_START,
    ) -> None:
        check_layout(font_base=font_base, program_start=program_start, size=size)
        self.size = size
        self.font_base = font_base
        self.program_start = program_start
        self.data = bytearray(size)
        self.read_count = 0
        self.write_count = 0

    def _check(self, address: int, length: int = 1) -> None:
        if address < 0 or length < 0 or address + length > self.size:
            end = address + max(length, 1) - 1
            raise OutOfBoundsAccess(
                f"Memory access 0x{address:X}-0x{end:X} outside 0x000-0x{self.size - 1:03X}"
            )

    def read_byte(self, address: int) -> int:
        self._check(address)
        self.read_count += 1
        return self.data[address]

    def write_byte(self, address: int, value: int) -> None:
        self._check(address)
        self.write_count += 1
        self.data[address] = value & 0xFF

    def read_block(self, address: int, length: int) -> bytes:
        self._check(address, length)
        self.read_count += length
        return bytes(self.data[address : address + length])

    def write_block(self, address: int, payload: bytes) -> None:
        self._check(address, len(payload))
        self.write_count += len(payload)
        self.data[address : address + len(payload)] = payload

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word."""
        hi, lo = self.read_block(address, 2)
        return (hi << 8) | lo

    def clear(self) -> None:
        self.data[:] = bytes(self.size)
        self.read_count = 0
        self.write_count = 0

    # ------------------------------------------------------------------ #
    # Loader
    # ------------------------------------------------------------------ #

    def install_font(self) -> None:
        self.data[self.font_base : self.font_base + FONT_SIZE] = bytes(FONT_GLYPHS)

    def load_program(self, image: bytes) -> int:
        """Install the font and copy ``image`` at the program origin.

        Images larger than the remaining memory are truncated. Returns the
        number of bytes actually loaded.
        """
        self.install_font()
        capacity = self.size - self.program_start
        if len(image) > capacity:
            logger.warning(
                "Program image is %d bytes; truncating to %d", len(image), capacity
            )
            image = image[:capacity]
        self.data[self.program_start : self.program_start + len(image)] = image
        logger.info(
            "Loaded %d bytes at 0x%03X", len(image), self.program_start
        )
        return len(image)


def read_program_file(path: Union[str, Path]) -> bytes:
    """Read a raw program image from disk."""
    source = Path(path)
    try:
        return source.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"Cannot read program {source}: {exc}") from exc


__all__ = ["Chip8Memory", "check_layout", "read_program_file"]

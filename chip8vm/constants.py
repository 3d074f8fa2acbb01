"""Shared architecture constants for the CHIP-8 virtual machine.

This module centralizes the fixed sizes and addresses used by the memory,
register file, display and keypad, so tests and adapters agree on them.
"""

# Total addressable memory in bytes.
MEMORY_SIZE = 0x1000

# Programs are loaded directly after the reserved interpreter area.
PROGRAM_START = 0x200

# Hex digit glyphs live in the reserved low region.
FONT_BASE = 0x050
GLYPH_HEIGHT = 5
GLYPH_COUNT = 16

NUM_REGISTERS = 16
VF = 0x0F  # Flag register index
STACK_DEPTH = 16

BYTE_MASK = 0xFF
INDEX_MASK = 0xFFFF

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8

NUM_KEYS = 16

INSTRUCTION_SIZE = 2

# Canonical timer decrement rate and a typical instruction rate.
TIMER_HZ = 60
DEFAULT_INSTRUCTIONS_PER_SECOND = 700

"""Pure decoder for CHIP-8 instruction words.

``decode`` maps a 16-bit word onto an :class:`Instruction` carrying an
:class:`Op` tag and the operand fields ``x``, ``y``, ``n``, ``nn`` and
``nnn``. Decoding never touches machine state; unknown words raise
:class:`~chip8vm.errors.InvalidOpcode`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import InvalidOpcode


class Op(Enum):
    """Instruction tags, named after the conventional mnemonics."""

    HALT = "0000"
    CLS = "00E0"
    RET = "00EE"
    JP = "1NNN"
    CALL = "2NNN"
    SE_VX_NN = "3XNN"
    SNE_VX_NN = "4XNN"
    SE_VX_VY = "5XY0"
    LD_VX_NN = "6XNN"
    ADD_VX_NN = "7XNN"
    LD_VX_VY = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD_VX_VY = "8XY4"
    SUB = "8XY5"
    SHR = "8XY6"
    SUBN = "8XY7"
    SHL = "8XYE"
    SNE_VX_VY = "9XY0"
    LD_I = "ANNN"
    JP_V0 = "BNNN"
    RND = "CXNN"
    DRW = "DXYN"
    SKP = "EX9E"
    SKNP = "EXA1"
    LD_VX_DT = "FX07"
    LD_VX_K = "FX0A"
    LD_DT_VX = "FX15"
    LD_ST_VX = "FX18"
    ADD_I_VX = "FX1E"
    LD_F_VX = "FX29"
    LD_B_VX = "FX33"
    LD_I_VX = "FX55"
    LD_VX_I = "FX65"


@dataclass(frozen=True, slots=True)
class Instruction:
    op: Op
    word: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def __str__(self) -> str:
        return f"{self.word:04X} {self.op.name}"


# Families that are fully identified by the high nibble.
_SIMPLE: Dict[int, Op] = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_NN,
    0x4: Op.SNE_VX_NN,
    0x6: Op.LD_VX_NN,
    0x7: Op.ADD_VX_NN,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

_FAMILY_0: Dict[int, Op] = {
    0x000: Op.HALT,
    0x0E0: Op.CLS,
    0x0EE: Op.RET,
}

_FAMILY_8: Dict[int, Op] = {
    0x0: Op.LD_VX_VY,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_VX_VY,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_FAMILY_E: Dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_FAMILY_F: Dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_I_VX,
    0x65: Op.LD_VX_I,
}


def _resolve(word: int) -> Optional[Op]:
    family = word >> 12
    n = word & 0x000F
    nn = word & 0x00FF
    if family in _SIMPLE:
        return _SIMPLE[family]
    if family == 0x0:
        return _FAMILY_0.get(word & 0x0FFF)
    if family == 0x5:
        return Op.SE_VX_VY if n == 0 else None
    if family == 0x9:
        return Op.SNE_VX_VY if n == 0 else None
    if family == 0x8:
        return _FAMILY_8.get(n)
    if family == 0xE:
        return _FAMILY_E.get(nn)
    return _FAMILY_F.get(nn)


def decode(word: int, address: Optional[int] = None) -> Instruction:
    """Decode a 16-bit instruction word."""

    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Instruction word out of range: {word:#x}")

    op = _resolve(word)
    if op is None:
        raise InvalidOpcode("Unknown instruction", address=address, opcode=word)

    return Instruction(
        op=op,
        word=word,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        nn=word & 0xFF,
        nnn=word & 0xFFF,
    )


def encode_words(*words: int) -> bytes:
    """Pack instruction words big-endian into a program image."""
    return b"".join(int(word & 0xFFFF).to_bytes(2, byteorder="big") for word in words)


__all__ = ["Op", "Instruction", "decode", "encode_words"]

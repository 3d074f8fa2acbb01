"""Register file, index register, program counter and call stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .constants import (
    BYTE_MASK,
    INDEX_MASK,
    NUM_REGISTERS,
    PROGRAM_START,
    STACK_DEPTH,
    VF,
)
from .errors import OutOfBoundsAccess, StackOverflow, StackUnderflow


class CallStack:
    """Bounded stack of subroutine return addresses."""

    def __init__(self, depth: int = STACK_DEPTH) -> None:
        self.depth = depth
        self._frames: List[int] = []

    def push(self, address: int) -> None:
        if len(self._frames) >= self.depth:
            raise StackOverflow(f"Call stack overflow (depth {self.depth})")
        self._frames.append(address)

    def pop(self) -> int:
        if not self._frames:
            raise StackUnderflow("Return with empty call stack")
        return self._frames.pop()

    def clear(self) -> None:
        self._frames.clear()

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self._frames)

    def __len__(self) -> int:
        return len(self._frames)


@dataclass
class Registers:
    """V0-VF, the index register ``I`` and the program counter."""

    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    _i: int = field(default=0, init=False)
    pc: int = PROGRAM_START
    stack: CallStack = field(default_factory=CallStack)

    def get(self, index: int) -> int:
        self._check(index)
        return self.v[index]

    def set(self, index: int, value: int) -> None:
        self._check(index)
        self.v[index] = value & BYTE_MASK

    @property
    def i(self) -> int:
        return self._i

    @i.setter
    def i(self, value: int) -> None:
        self._i = value & INDEX_MASK

    @property
    def vf(self) -> int:
        return self.v[VF]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[VF] = value & BYTE_MASK

    def reset(self, pc: int = PROGRAM_START) -> None:
        self.v = [0] * NUM_REGISTERS
        self._i = 0
        self.pc = pc
        self.stack.clear()

    def to_dict(self) -> dict:
        values = {f"v{idx:X}": value for idx, value in enumerate(self.v)}
        values["i"] = self._i
        values["pc"] = self.pc
        values["sp"] = len(self.stack)
        return values

    @staticmethod
    def _check(index: int) -> None:
        if not 0 <= index < NUM_REGISTERS:
            raise OutOfBoundsAccess(f"Register index out of range: {index}")


__all__ = ["CallStack", "Registers"]

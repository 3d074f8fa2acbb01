"""Exception hierarchy for the CHIP-8 virtual machine."""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for every error raised by the package."""


class ExecutionError(Chip8Error):
    """Fatal error raised while executing a single instruction.

    ``address`` is the program counter of the faulting instruction and
    ``opcode`` the raw instruction word, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        address: Optional[int] = None,
        opcode: Optional[int] = None,
    ) -> None:
        self.message = message
        self.address = address
        self.opcode = opcode
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [self.message]
        if self.address is not None:
            parts.append(f"at 0x{self.address:03X}")
        if self.opcode is not None:
            parts.append(f"(opcode 0x{self.opcode:04X})")
        return " ".join(parts)

    def with_context(self, *, address: int, opcode: Optional[int]) -> "ExecutionError":
        """Fill in the instruction context if it is not known yet."""

        if self.address is None:
            self.address = address
        if self.opcode is None:
            self.opcode = opcode
        self.args = (self._format(),)
        return self


class StackOverflow(ExecutionError):
    """Subroutine call nesting exceeded the stack depth."""


class StackUnderflow(ExecutionError):
    """Return executed with no active subroutine call."""


class InvalidOpcode(ExecutionError):
    """Instruction word matches no known instruction."""


class OutOfBoundsAccess(ExecutionError):
    """Memory, register or key index outside its valid range."""


class ProgramLoadError(Chip8Error):
    """Program image could not be read."""


__all__ = [
    "Chip8Error",
    "ExecutionError",
    "StackOverflow",
    "StackUnderflow",
    "InvalidOpcode",
    "OutOfBoundsAccess",
    "ProgramLoadError",
]

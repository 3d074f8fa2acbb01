"""CHIP-8 execution engine.

The emulator owns every piece of machine state (memory, registers, display,
timers, keypad) and advances it one instruction per :meth:`Chip8Emulator.step`.
Execution is a small state machine:

* ``RUNNING``: fetch, decode and execute the instruction at ``pc``.
* ``WAITING_FOR_KEY``: suspended by ``LD Vx, K`` until the keypad reports a
  pressed key; the host keeps pumping input meanwhile.
* ``HALTED``: terminal, entered on the ``0000`` instruction.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set

from .constants import (
    BYTE_MASK,
    FONT_BASE,
    INSTRUCTION_SIZE,
    PROGRAM_START,
)
from .cpu import Registers
from .decoder import Instruction, Op, decode
from .display.font import glyph_address
from .display.framebuffer import DisplayBuffer
from .errors import ExecutionError
from .keypad import Keypad
from .memory import Chip8Memory
from .timers import Timers

logger = logging.getLogger(__name__)


class ExecutionState(Enum):
    RUNNING = "running"
    WAITING_FOR_KEY = "waiting_for_key"
    HALTED = "halted"


Handler = Callable[["Chip8Emulator", Instruction], None]


class Chip8Emulator:
    """CHIP-8 machine: state plus the fetch/decode/execute loop."""

    def __init__(
        self,
        *,
        program_start: int = PROGRAM_START,
        font_base: int = FONT_BASE,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.program_start = program_start
        self.font_base = font_base
        self.memory = Chip8Memory(font_base=font_base, program_start=program_start)
        self.regs = Registers(pc=program_start)
        self.display = DisplayBuffer()
        self.timers = Timers()
        self.keypad = Keypad()
        self._rng = rng if rng is not None else random.Random(seed)

        self.state = ExecutionState.RUNNING
        self.instruction_count = 0
        self.last_instruction: Optional[Instruction] = None
        self.breakpoints: Set[int] = set()
        self._key_wait_register: Optional[int] = None

        self.memory.install_font()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def load_program(self, image: bytes) -> int:
        """Install the font and the program image; returns bytes loaded."""

        return self.memory.load_program(image)

    def reset(self, *, clear_memory: bool = False) -> None:
        """Return to the power-on state, optionally wiping memory."""

        if clear_memory:
            self.memory.clear()
            self.memory.install_font()
        self.regs.reset(pc=self.program_start)
        self.display.clear()
        self.display.dirty = False
        self.timers.reset()
        self.keypad.release_all()
        self.state = ExecutionState.RUNNING
        self.instruction_count = 0
        self.last_instruction = None
        self._key_wait_register = None

    @property
    def halted(self) -> bool:
        return self.state is ExecutionState.HALTED

    @property
    def waiting_for_key(self) -> bool:
        return self.state is ExecutionState.WAITING_FOR_KEY

    # ------------------------------------------------------------------ #
    # Stepping
    # ------------------------------------------------------------------ #

    def step(self) -> bool:
        """Advance the state machine once.

        Returns False once the machine has halted. Execution errors leave
        ``pc`` pointing at the faulting instruction and propagate with the
        address and opcode attached.
        """

        if self.state is ExecutionState.HALTED:
            return False
        if self.state is ExecutionState.WAITING_FOR_KEY:
            self._resume_key_wait()
            return True

        pc = self.regs.pc
        word: Optional[int] = None
        try:
            word = self.memory.read_word(pc)
            self.regs.pc = pc + INSTRUCTION_SIZE
            instr = decode(word, address=pc)
            self._HANDLERS[instr.op](self, instr)
        except ExecutionError as exc:
            self.regs.pc = pc
            exc.with_context(address=pc, opcode=word)
            logger.error("Execution stopped: %s", exc)
            raise

        self.instruction_count += 1
        self.last_instruction = instr
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%03X: %s I=%03X V=%s",
                pc,
                instr,
                self.regs.i,
                " ".join(f"{v:02X}" for v in self.regs.v),
            )
        return self.state is not ExecutionState.HALTED

    def run(self, max_instructions: Optional[int] = None) -> int:
        """Execute until halt, key wait, breakpoint or the budget runs out.

        Returns the number of instructions executed.
        """

        executed = 0
        while max_instructions is None or executed < max_instructions:
            if self.state is ExecutionState.WAITING_FOR_KEY:
                self._resume_key_wait()
                if self.state is ExecutionState.WAITING_FOR_KEY:
                    break
            if self.state is ExecutionState.HALTED:
                break
            if executed and self.regs.pc in self.breakpoints:
                break
            self.step()
            executed += 1
        return executed

    def add_breakpoint(self, address: int) -> None:
        self.breakpoints.add(address)

    def remove_breakpoint(self, address: int) -> None:
        self.breakpoints.discard(address)

    def peek_instruction(self) -> Optional[int]:
        """Word at ``pc`` without side effects, None when out of range."""

        pc = self.regs.pc
        if 0 <= pc <= self.memory.size - INSTRUCTION_SIZE:
            return (self.memory.data[pc] << 8) | self.memory.data[pc + 1]
        return None

    def get_cpu_state(self) -> Dict[str, Any]:
        state: Dict[str, Any] = self.regs.to_dict()
        state["stack"] = list(self.regs.stack.snapshot())
        state["delay"] = self.timers.delay
        state["sound"] = self.timers.sound
        state["state"] = self.state.value
        state["instructions"] = self.instruction_count
        return state

    def _resume_key_wait(self) -> None:
        key = self.keypad.first_pressed()
        if key is None or self._key_wait_register is None:
            return
        self.regs.set(self._key_wait_register, key)
        logger.debug("Key %X resumed execution (V%X)", key, self._key_wait_register)
        self._key_wait_register = None
        self.state = ExecutionState.RUNNING

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.regs.pc += INSTRUCTION_SIZE

    # ------------------------------------------------------------------ #
    # Instruction handlers
    # ------------------------------------------------------------------ #

    def halt(self, instr: Instruction) -> None:
        logger.info("Halt instruction at 0x%03X", self.regs.pc - INSTRUCTION_SIZE)
        self.state = ExecutionState.HALTED

    def clear_display(self, instr: Instruction) -> None:
        self.display.clear()

    def return_from_subroutine(self, instr: Instruction) -> None:
        self.regs.pc = self.regs.stack.pop()

    def jump(self, instr: Instruction) -> None:
        self.regs.pc = instr.nnn

    def call(self, instr: Instruction) -> None:
        self.regs.stack.push(self.regs.pc)
        self.regs.pc = instr.nnn

    def skip_if_equal_imm(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get(instr.x) == instr.nn)

    def skip_if_not_equal_imm(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get(instr.x) != instr.nn)

    def skip_if_equal_reg(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get(instr.x) == self.regs.get(instr.y))

    def skip_if_not_equal_reg(self, instr: Instruction) -> None:
        self._skip_if(self.regs.get(instr.x) != self.regs.get(instr.y))

    def load_imm(self, instr: Instruction) -> None:
        self.regs.set(instr.x, instr.nn)

    def add_imm(self, instr: Instruction) -> None:
        # Wraps silently; VF is untouched.
        self.regs.set(instr.x, self.regs.get(instr.x) + instr.nn)

    def move(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self.regs.get(instr.y))

    def bit_or(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self.regs.get(instr.x) | self.regs.get(instr.y))

    def bit_and(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self.regs.get(instr.x) & self.regs.get(instr.y))

    def bit_xor(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self.regs.get(instr.x) ^ self.regs.get(instr.y))

    # The flag is written after the result, so VF as destination ends up
    # holding the flag.

    def add_reg(self, instr: Instruction) -> None:
        total = self.regs.get(instr.x) + self.regs.get(instr.y)
        self.regs.set(instr.x, total)
        self.regs.vf = 1 if total > BYTE_MASK else 0

    def sub_reg(self, instr: Instruction) -> None:
        vx = self.regs.get(instr.x)
        vy = self.regs.get(instr.y)
        self.regs.set(instr.x, vx - vy)
        self.regs.vf = 1 if vx > vy else 0

    def sub_reversed(self, instr: Instruction) -> None:
        vx = self.regs.get(instr.x)
        vy = self.regs.get(instr.y)
        self.regs.set(instr.x, vy - vx)
        self.regs.vf = 1 if vy > vx else 0

    def shift_right(self, instr: Instruction) -> None:
        vx = self.regs.get(instr.x)
        self.regs.set(instr.x, vx >> 1)
        self.regs.vf = vx & 0x01

    def shift_left(self, instr: Instruction) -> None:
        vx = self.regs.get(instr.x)
        self.regs.set(instr.x, vx << 1)
        self.regs.vf = (vx >> 7) & 0x01

    def load_index(self, instr: Instruction) -> None:
        self.regs.i = instr.nnn

    def jump_offset(self, instr: Instruction) -> None:
        self.regs.pc = instr.nnn + self.regs.get(0)

    def random_masked(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self._rng.randrange(256) & instr.nn)

    def draw(self, instr: Instruction) -> None:
        rows = self.memory.read_block(self.regs.i, instr.n)
        collision = self.display.draw_sprite(
            self.regs.get(instr.x), self.regs.get(instr.y), rows
        )
        self.regs.vf = 1 if collision else 0

    def skip_if_key(self, instr: Instruction) -> None:
        self._skip_if(self.keypad.is_pressed(self.regs.get(instr.x)))

    def skip_if_not_key(self, instr: Instruction) -> None:
        self._skip_if(not self.keypad.is_pressed(self.regs.get(instr.x)))

    def read_delay(self, instr: Instruction) -> None:
        self.regs.set(instr.x, self.timers.delay)

    def wait_for_key(self, instr: Instruction) -> None:
        self._key_wait_register = instr.x
        self.state = ExecutionState.WAITING_FOR_KEY

    def set_delay(self, instr: Instruction) -> None:
        self.timers.delay = self.regs.get(instr.x)

    def set_sound(self, instr: Instruction) -> None:
        self.timers.sound = self.regs.get(instr.x)

    def add_index(self, instr: Instruction) -> None:
        self.regs.i = self.regs.i + self.regs.get(instr.x)

    def load_glyph(self, instr: Instruction) -> None:
        self.regs.i = glyph_address(self.regs.get(instr.x) & 0x0F, self.font_base)

    def store_bcd(self, instr: Instruction) -> None:
        value = self.regs.get(instr.x)
        digits = bytes((value // 100, (value // 10) % 10, value % 10))
        self.memory.write_block(self.regs.i, digits)

    def store_registers(self, instr: Instruction) -> None:
        self.memory.write_block(self.regs.i, bytes(self.regs.v[: instr.x + 1]))

    def load_registers(self, instr: Instruction) -> None:
        payload = self.memory.read_block(self.regs.i, instr.x + 1)
        for index, value in enumerate(payload):
            self.regs.set(index, value)

    _HANDLERS: Dict[Op, Handler] = {
        Op.HALT: halt,
        Op.CLS: clear_display,
        Op.RET: return_from_subroutine,
        Op.JP: jump,
        Op.CALL: call,
        Op.SE_VX_NN: skip_if_equal_imm,
        Op.SNE_VX_NN: skip_if_not_equal_imm,
        Op.SE_VX_VY: skip_if_equal_reg,
        Op.LD_VX_NN: load_imm,
        Op.ADD_VX_NN: add_imm,
        Op.LD_VX_VY: move,
        Op.OR: bit_or,
        Op.AND: bit_and,
        Op.XOR: bit_xor,
        Op.ADD_VX_VY: add_reg,
        Op.SUB: sub_reg,
        Op.SHR: shift_right,
        Op.SUBN: sub_reversed,
        Op.SHL: shift_left,
        Op.SNE_VX_VY: skip_if_not_equal_reg,
        Op.LD_I: load_index,
        Op.JP_V0: jump_offset,
        Op.RND: random_masked,
        Op.DRW: draw,
        Op.SKP: skip_if_key,
        Op.SKNP: skip_if_not_key,
        Op.LD_VX_DT: read_delay,
        Op.LD_VX_K: wait_for_key,
        Op.LD_DT_VX: set_delay,
        Op.LD_ST_VX: set_sound,
        Op.ADD_I_VX: add_index,
        Op.LD_F_VX: load_glyph,
        Op.LD_B_VX: store_bcd,
        Op.LD_I_VX: store_registers,
        Op.LD_VX_I: load_registers,
    }


__all__ = ["Chip8Emulator", "ExecutionState"]

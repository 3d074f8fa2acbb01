"""Single-step gate consulted by the runner before each fetch."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Iterable, List, Optional, Protocol, TextIO

from ..emulator import Chip8Emulator
from ..state_model import MachineState, capture_state, diff_states, format_diff


class StepCommand(Enum):
    STEP = "step"
    CONTINUE = "continue"  # Leave single-step mode and run freely
    QUIT = "quit"


class StepGate(Protocol):
    def wait(self, emulator: Chip8Emulator) -> StepCommand: ...


class ScriptedStepGate:
    """Replays a fixed command sequence, then steps forever."""

    def __init__(
        self,
        commands: Iterable[StepCommand],
        default: StepCommand = StepCommand.STEP,
    ):
        self._commands: List[StepCommand] = list(commands)
        self.default = default
        self.pauses = 0

    def wait(self, emulator: Chip8Emulator) -> StepCommand:
        self.pauses += 1
        if self._commands:
            return self._commands.pop(0)
        return self.default


class ConsoleStepGate:
    """Line-oriented step prompt.

    Empty line steps one instruction, ``c`` continues without the gate,
    ``q`` quits, ``d`` prints the display and re-prompts.
    """

    PROMPT = "[step] enter=step c=continue d=display q=quit> "

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self._in = stdin if stdin is not None else sys.stdin
        self._out = stdout if stdout is not None else sys.stdout
        self._previous: Optional[MachineState] = None

    def wait(self, emulator: Chip8Emulator) -> StepCommand:
        current = capture_state(emulator)
        self._print_status(emulator, current)
        self._previous = current

        while True:
            self._out.write(self.PROMPT)
            self._out.flush()
            line = self._in.readline()
            if not line:
                # EOF on the control stream ends the session.
                return StepCommand.QUIT
            command = line.strip().lower()
            if command == "":
                return StepCommand.STEP
            if command in ("c", "continue"):
                return StepCommand.CONTINUE
            if command in ("q", "quit"):
                return StepCommand.QUIT
            if command in ("d", "display"):
                self._out.write(emulator.display.render_text() + "\n")
                continue
            self._out.write(f"Unknown command: {command!r}\n")

    def _print_status(self, emulator: Chip8Emulator, current: MachineState) -> None:
        word = emulator.peek_instruction()
        word_text = f"{word:04X}" if word is not None else "----"
        self._out.write(
            f"PC={current.cpu.pc:03X} OP={word_text} I={current.cpu.index:03X} "
            f"DT={current.timers.delay:02X} ST={current.timers.sound:02X} "
            f"SP={len(current.cpu.stack)}\n"
        )
        diff = diff_states(self._previous, current)
        if not diff.is_empty():
            self._out.write(f"  changed: {format_diff(diff)}\n")


__all__ = ["StepCommand", "StepGate", "ScriptedStepGate", "ConsoleStepGate"]

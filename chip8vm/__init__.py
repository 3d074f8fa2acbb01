"""CHIP-8 virtual machine package."""

from .config import MachineConfig
from .decoder import Instruction, Op, decode, encode_words
from .emulator import Chip8Emulator, ExecutionState
from .errors import (
    Chip8Error,
    ExecutionError,
    InvalidOpcode,
    OutOfBoundsAccess,
    ProgramLoadError,
    StackOverflow,
    StackUnderflow,
)
from .keypad import KEY_LAYOUT, Keypad
from .runner import HeadlessHost, Runner, RunResult, StopReason
from .state_model import (
    CPUState,
    FieldDiff,
    KeypadState,
    MachineState,
    StateDiff,
    TimerState,
    capture_state,
    diff_states,
)
from .timers import TimerClock, Timers

__all__ = [
    "Chip8Emulator",
    "ExecutionState",
    "MachineConfig",
    "Instruction",
    "Op",
    "decode",
    "encode_words",
    "Chip8Error",
    "ExecutionError",
    "InvalidOpcode",
    "OutOfBoundsAccess",
    "ProgramLoadError",
    "StackOverflow",
    "StackUnderflow",
    "Keypad",
    "KEY_LAYOUT",
    "HeadlessHost",
    "Runner",
    "RunResult",
    "StopReason",
    "CPUState",
    "TimerState",
    "KeypadState",
    "MachineState",
    "FieldDiff",
    "StateDiff",
    "capture_state",
    "diff_states",
    "Timers",
    "TimerClock",
]

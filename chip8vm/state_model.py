"""Immutable machine snapshots and diff utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .emulator import Chip8Emulator


@dataclass(frozen=True)
class CPUState:
    """Register file, index, program counter and call stack."""

    registers: Tuple[int, ...]
    index: int
    pc: int
    stack: Tuple[int, ...]
    execution_state: str
    instruction_count: int


@dataclass(frozen=True)
class TimerState:
    delay: int
    sound: int


@dataclass(frozen=True)
class KeypadState:
    pressed_keys: Tuple[int, ...]


@dataclass(frozen=True)
class MachineState:
    """Composite immutable snapshot of the whole machine."""

    cpu: CPUState
    timers: TimerState
    keypad: KeypadState
    display: Tuple[int, ...]
    memory: bytes


@dataclass(frozen=True)
class FieldDiff:
    """Difference for a single named field."""

    name: str
    before: object
    after: object


@dataclass(frozen=True)
class StateDiff:
    """Aggregated differences between two machine states."""

    cpu: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    timers: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    keypad: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    memory: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    display_changed: bool = False

    def is_empty(self) -> bool:
        return (
            not self.cpu
            and not self.timers
            and not self.keypad
            and not self.memory
            and not self.display_changed
        )

    def fields(self) -> Tuple[FieldDiff, ...]:
        return self.cpu + self.timers + self.keypad + self.memory


def capture_state(emulator: Chip8Emulator) -> MachineState:
    """Capture the current machine state as an immutable snapshot."""

    regs = emulator.regs
    cpu = CPUState(
        registers=tuple(regs.v),
        index=regs.i,
        pc=regs.pc,
        stack=regs.stack.snapshot(),
        execution_state=emulator.state.value,
        instruction_count=emulator.instruction_count,
    )
    return MachineState(
        cpu=cpu,
        timers=TimerState(delay=emulator.timers.delay, sound=emulator.timers.sound),
        keypad=KeypadState(pressed_keys=emulator.keypad.pressed_keys()),
        display=emulator.display.rows_as_ints(),
        memory=bytes(emulator.memory.data),
    )


def diff_states(before: Optional[MachineState], after: MachineState) -> StateDiff:
    """Compute structured differences between two snapshots."""

    if before is None:
        return StateDiff()

    return StateDiff(
        cpu=_diff_cpu(before.cpu, after.cpu),
        timers=_diff_timers(before.timers, after.timers),
        keypad=_diff_keypad(before.keypad, after.keypad),
        memory=tuple(_diff_memory(before.memory, after.memory)),
        display_changed=before.display != after.display,
    )


def _diff_cpu(before: CPUState, after: CPUState) -> Tuple[FieldDiff, ...]:
    diffs: list[FieldDiff] = []
    for idx, (prev, cur) in enumerate(zip(before.registers, after.registers)):
        if prev != cur:
            diffs.append(FieldDiff(f"V{idx:X}", prev, cur))
    for name in ("index", "pc", "stack", "execution_state", "instruction_count"):
        prev = getattr(before, name)
        cur = getattr(after, name)
        if prev != cur:
            diffs.append(FieldDiff(name, prev, cur))
    return tuple(diffs)


def _diff_timers(before: TimerState, after: TimerState) -> Tuple[FieldDiff, ...]:
    diffs: list[FieldDiff] = []
    if before.delay != after.delay:
        diffs.append(FieldDiff("delay", before.delay, after.delay))
    if before.sound != after.sound:
        diffs.append(FieldDiff("sound", before.sound, after.sound))
    return tuple(diffs)


def _diff_keypad(before: KeypadState, after: KeypadState) -> Tuple[FieldDiff, ...]:
    if before.pressed_keys != after.pressed_keys:
        return (FieldDiff("pressed_keys", before.pressed_keys, after.pressed_keys),)
    return ()


def _diff_memory(before: bytes, after: bytes) -> Iterable[FieldDiff]:
    for address, (prev, cur) in enumerate(zip(before, after)):
        if prev != cur:
            yield FieldDiff(f"mem[0x{address:03X}]", prev, cur)


def format_diff(diff: StateDiff) -> str:
    """One ``name: before -> after`` entry per changed field."""

    parts = []
    for entry in diff.fields():
        before, after = entry.before, entry.after
        if isinstance(before, int) and isinstance(after, int):
            parts.append(f"{entry.name}: {before:#04x} -> {after:#04x}")
        else:
            parts.append(f"{entry.name}: {before} -> {after}")
    if diff.display_changed:
        parts.append("display changed")
    return ", ".join(parts)


__all__ = [
    "CPUState",
    "TimerState",
    "KeypadState",
    "MachineState",
    "FieldDiff",
    "StateDiff",
    "capture_state",
    "diff_states",
    "format_diff",
]

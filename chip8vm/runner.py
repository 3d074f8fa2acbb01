"""Runtime loop around the execution engine.

The engine itself only exposes ``step()``; this module supplies what the
instruction set leaves to the surroundings: pacing instructions against wall
time, decrementing the delay/sound timers at a fixed rate, pumping host input
(also while the engine is suspended on a key read), presenting the display and
consulting the optional single-step gate.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple, Union

import numpy as np

from .config import MachineConfig
from .debug.gate import StepCommand, StepGate
from .display.framebuffer import DisplayBuffer
from .display.palette import Color
from .display.renderer import DisplayRenderer
from .emulator import Chip8Emulator
from .keypad import Keypad
from .timers import TimerClock

logger = logging.getLogger(__name__)


class StopReason(Enum):
    HALTED = "halted"
    QUIT = "quit"
    STEP_LIMIT = "step_limit"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class RunResult:
    reason: StopReason
    instructions: int
    timer_ticks: int
    elapsed: float


class Host(Protocol):
    """Presentation/input adapter driven by the runner."""

    def pump_input(self, keypad: Keypad) -> None: ...

    def present(self, display: DisplayBuffer) -> None: ...

    def set_sound(self, active: bool) -> None: ...


class HeadlessHost:
    """Host without a window: scripted keys, frames kept in memory.

    ``held_keys`` stay pressed for the whole run. ``schedule`` queues key
    transitions that are applied on a given input pump (0-based).
    """

    def __init__(
        self,
        *,
        held_keys: Iterable[int] = (),
        renderer: Optional[DisplayRenderer] = None,
        save_path: Optional[Union[str, Path]] = None,
    ):
        self.held_keys = tuple(held_keys)
        self.renderer = renderer if renderer is not None else DisplayRenderer()
        self.save_path = Path(save_path) if save_path is not None else None
        self._schedule: Dict[int, List[Tuple[int, bool]]] = {}
        self.pump_count = 0
        self.frames_presented = 0
        self.last_frame: Optional[np.ndarray] = None
        self._display: Optional[DisplayBuffer] = None
        self.sound_changes: List[bool] = []

    def schedule(self, pump: int, key: int, pressed: bool = True) -> None:
        self._schedule.setdefault(pump, []).append((key, pressed))

    def pump_input(self, keypad: Keypad) -> None:
        if self.pump_count == 0:
            for key in self.held_keys:
                keypad.set(key, True)
        for key, pressed in self._schedule.pop(self.pump_count, ()):
            keypad.set(key, pressed)
        self.pump_count += 1

    def present(self, display: DisplayBuffer) -> None:
        self.frames_presented += 1
        self.last_frame = display.to_array()
        self._display = display

    def set_sound(self, active: bool) -> None:
        self.sound_changes.append(active)

    def close(self) -> Optional[Path]:
        """Save the last presented frame when a path was given."""

        if self.save_path is None or self._display is None:
            return None
        return self.renderer.save_display(self._display, self.save_path)


class Runner:
    """Drives an emulator against a host at a configured pace."""

    def __init__(
        self,
        emulator: Chip8Emulator,
        host: Host,
        config: Optional[MachineConfig] = None,
        *,
        gate: Optional[StepGate] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.emulator = emulator
        self.host = host
        self.config = config if config is not None else MachineConfig()
        self.gate = gate
        self._clock = clock
        self._sleep = sleep
        self.timer_clock = TimerClock(rate_hz=self.config.timer_hz)
        ips = self.config.instructions_per_second
        self._period = 1.0 / ips if ips else 0.0
        self._idle = self._period or 1.0 / self.config.timer_hz
        self._sound_active = False

    def run(
        self,
        max_steps: Optional[int] = None,
        timeout_secs: Optional[float] = None,
    ) -> RunResult:
        emu = self.emulator
        start = self._clock()
        self.timer_clock.reset(now=start)
        next_due = start
        executed = 0

        while True:
            now = self._clock()
            if emu.halted:
                reason = StopReason.HALTED
                break
            if max_steps is not None and executed >= max_steps:
                reason = StopReason.STEP_LIMIT
                break
            if timeout_secs is not None and now - start >= timeout_secs:
                reason = StopReason.TIMEOUT
                break

            self.host.pump_input(emu.keypad)
            self._tick_timers(now)

            if emu.waiting_for_key:
                emu.step()
                if emu.waiting_for_key:
                    self._sleep(self._idle)
                    continue
                next_due = self._clock()

            if self.gate is not None:
                command = self.gate.wait(emu)
                if command is StepCommand.QUIT:
                    reason = StopReason.QUIT
                    break
                if command is StepCommand.CONTINUE:
                    logger.info("Leaving single-step mode")
                    self.gate = None
                next_due = self._clock()

            emu.step()
            executed += 1

            if emu.display.dirty:
                self.host.present(emu.display)
                emu.display.dirty = False

            if self._period:
                next_due += self._period
                delay = next_due - self._clock()
                if delay > 0:
                    self._sleep(delay)

        elapsed = self._clock() - start
        logger.info(
            "Run stopped (%s) after %d instructions in %.3fs",
            reason.value,
            executed,
            elapsed,
        )
        return RunResult(
            reason=reason,
            instructions=executed,
            timer_ticks=self.timer_clock.ticks,
            elapsed=elapsed,
        )

    def _tick_timers(self, now: float) -> None:
        timers = self.emulator.timers
        for _ in range(self.timer_clock.advance(now)):
            timers.tick()
        active = timers.sound_active
        if active != self._sound_active:
            self._sound_active = active
            self.host.set_sound(active)


def build_renderer(config: MachineConfig) -> DisplayRenderer:
    return DisplayRenderer(scale=config.scale, fg_color=Color.from_name(config.color).rgb)


__all__ = [
    "StopReason",
    "RunResult",
    "Host",
    "HeadlessHost",
    "Runner",
    "build_renderer",
]

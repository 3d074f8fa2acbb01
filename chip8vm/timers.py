"""Delay/sound countdown timers and the real-time tick clock."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import BYTE_MASK, TIMER_HZ


class Timers:
    """The two 8-bit countdown registers.

    Instructions only read and write them; :meth:`tick` is driven by the
    runtime loop at ``TIMER_HZ``.
    """

    def __init__(self) -> None:
        self._delay = 0
        self._sound = 0

    @property
    def delay(self) -> int:
        return self._delay

    @delay.setter
    def delay(self, value: int) -> None:
        self._delay = value & BYTE_MASK

    @property
    def sound(self) -> int:
        return self._sound

    @sound.setter
    def sound(self, value: int) -> None:
        self._sound = value & BYTE_MASK

    @property
    def sound_active(self) -> bool:
        return self._sound > 0

    def tick(self) -> None:
        if self._delay:
            self._delay -= 1
        if self._sound:
            self._sound -= 1

    def reset(self) -> None:
        self._delay = 0
        self._sound = 0


@dataclass
class TimerClock:
    """Converts wall-clock time into whole timer ticks."""

    rate_hz: float = TIMER_HZ
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.rate_hz <= 0:
            raise ValueError(f"Timer rate must be positive: {self.rate_hz}")
        self._start: float | None = None
        self._fired = 0

    def reset(self, *, now: float) -> None:
        """Start counting from ``now``."""

        self._start = now
        self._fired = 0

    def advance(self, now: float) -> int:
        """Return how many ticks elapsed since the previous call."""

        if not self.enabled:
            return 0
        if self._start is None:
            self.reset(now=now)
            return 0

        # Small epsilon absorbs float error at exact tick boundaries.
        due = int((now - self._start) * self.rate_hz + 1e-9)
        fired = max(0, due - self._fired)
        self._fired += fired
        return fired

    @property
    def ticks(self) -> int:
        return self._fired


__all__ = ["Timers", "TimerClock"]

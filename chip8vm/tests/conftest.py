"""Shared pytest fixtures for the CHIP-8 core tests."""

from __future__ import annotations

from typing import Callable

import pytest

from chip8vm.decoder import encode_words
from chip8vm.emulator import Chip8Emulator

LoadWords = Callable[..., Chip8Emulator]


@pytest.fixture
def emu() -> Chip8Emulator:
    return Chip8Emulator(seed=1234)


@pytest.fixture
def load(emu: Chip8Emulator) -> LoadWords:
    """Load instruction words at the program origin and return the emulator."""

    def _load(*words: int) -> Chip8Emulator:
        emu.load_program(encode_words(*words))
        return emu

    return _load


class FakeClock:
    """Manual clock; ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps = 0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps += 1
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

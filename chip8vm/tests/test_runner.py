"""Runtime loop tests driven by a fake clock."""

from __future__ import annotations

import pytest
from PIL import Image

from chip8vm.config import MachineConfig
from chip8vm.debug.gate import ScriptedStepGate, StepCommand
from chip8vm.display.renderer import DisplayRenderer
from chip8vm.errors import StackUnderflow
from chip8vm.runner import HeadlessHost, Runner, StopReason, build_renderer

UNTHROTTLED = MachineConfig(instructions_per_second=0)


def _runner(emu, fake_clock, host=None, config=UNTHROTTLED, gate=None) -> Runner:
    return Runner(
        emu,
        host if host is not None else HeadlessHost(),
        config,
        gate=gate,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )


def test_runs_until_halt(load, fake_clock) -> None:
    emu = load(0x6001, 0x6102, 0x0000)
    result = _runner(emu, fake_clock).run()
    assert result.reason is StopReason.HALTED
    assert result.instructions == 3
    assert fake_clock.sleeps == 0


def test_step_limit(load, fake_clock) -> None:
    emu = load(0x1200)
    result = _runner(emu, fake_clock).run(max_steps=25)
    assert result.reason is StopReason.STEP_LIMIT
    assert result.instructions == 25


def test_pacing_and_timeout(load, fake_clock) -> None:
    emu = load(0x1200)
    config = MachineConfig(instructions_per_second=600)
    result = _runner(emu, fake_clock, config=config).run(timeout_secs=1.0)
    assert result.reason is StopReason.TIMEOUT
    assert 595 <= result.instructions <= 605
    assert result.elapsed == pytest.approx(1.0, abs=0.01)


def test_delay_timer_counts_down_at_sixty_hertz(load, fake_clock) -> None:
    # DT = 30, then spin.
    emu = load(0x601E, 0xF015, 0x1204)
    config = MachineConfig(instructions_per_second=600)
    result = _runner(emu, fake_clock, config=config).run(timeout_secs=0.25)
    assert 14 <= result.timer_ticks <= 15
    assert 15 <= emu.timers.delay <= 16


def test_delay_loop_finishes_after_two_seconds(load, fake_clock) -> None:
    # DT = 120; poll DT until it reads zero.
    emu = load(0x6078, 0xF015, 0xF107, 0x3100, 0x1204, 0x0000)
    config = MachineConfig(instructions_per_second=600)
    result = _runner(emu, fake_clock, config=config).run(timeout_secs=5.0)
    assert result.reason is StopReason.HALTED
    assert 120 <= result.timer_ticks <= 121
    assert result.elapsed == pytest.approx(2.0, abs=0.05)


def test_sound_state_reported_to_host(load, fake_clock) -> None:
    emu = load(0x6003, 0xF018, 0x1204)
    host = HeadlessHost()
    config = MachineConfig(instructions_per_second=600)
    _runner(emu, fake_clock, host=host, config=config).run(timeout_secs=0.2)
    assert host.sound_changes == [True, False]


def test_key_wait_resolved_by_host_input(load, fake_clock) -> None:
    emu = load(0xF20A, 0x0000)
    host = HeadlessHost()
    host.schedule(3, 0x7)
    result = _runner(emu, fake_clock, host=host).run()
    assert result.reason is StopReason.HALTED
    assert result.instructions == 2
    assert emu.regs.get(2) == 0x7
    # Idle sleeps while parked on the key read.
    assert fake_clock.sleeps == 2
    assert host.pump_count == 4


def test_key_wait_times_out(load, fake_clock) -> None:
    emu = load(0xF20A, 0x0000)
    result = _runner(emu, fake_clock).run(timeout_secs=0.5)
    assert result.reason is StopReason.TIMEOUT
    assert emu.waiting_for_key


def test_held_keys(load, fake_clock) -> None:
    emu = load(0x6505, 0xE59E, 0x6101, 0x0000)
    host = HeadlessHost(held_keys=[0x5])
    _runner(emu, fake_clock, host=host).run()
    assert emu.regs.get(1) == 0


def test_scheduled_release(load, fake_clock) -> None:
    emu = load(0x1200)
    host = HeadlessHost(held_keys=[0x5])
    host.schedule(2, 0x5, pressed=False)
    _runner(emu, fake_clock, host=host).run(max_steps=4)
    assert not emu.keypad.is_pressed(0x5)
    assert emu.keypad.press_count == 1


def test_gate_quit(load, fake_clock) -> None:
    emu = load(0x6001, 0x6102, 0x6203, 0x0000)
    gate = ScriptedStepGate([StepCommand.STEP, StepCommand.STEP, StepCommand.QUIT])
    result = _runner(emu, fake_clock, gate=gate).run()
    assert result.reason is StopReason.QUIT
    assert result.instructions == 2
    assert gate.pauses == 3
    assert emu.regs.get(2) == 0


def test_gate_continue_drops_single_step(load, fake_clock) -> None:
    emu = load(0x6001, 0x6102, 0x6203, 0x0000)
    gate = ScriptedStepGate([StepCommand.STEP, StepCommand.CONTINUE])
    runner = _runner(emu, fake_clock, gate=gate)
    result = runner.run()
    assert result.reason is StopReason.HALTED
    assert result.instructions == 4
    assert gate.pauses == 2
    assert runner.gate is None


def test_frames_presented_when_display_changes(load, fake_clock) -> None:
    emu = load(0x00E0, 0x6000, 0xF029, 0x6100, 0x6200, 0xD125, 0x0000)
    host = HeadlessHost()
    _runner(emu, fake_clock, host=host).run()
    assert host.frames_presented == 2
    assert host.last_frame is not None
    assert host.last_frame[0, :4].all()
    assert not emu.display.dirty


def test_close_saves_png(load, fake_clock, tmp_path) -> None:
    emu = load(0x6000, 0xF029, 0xD005, 0x0000)
    target = tmp_path / "frame.png"
    host = HeadlessHost(renderer=DisplayRenderer(scale=2), save_path=target)
    _runner(emu, fake_clock, host=host).run()
    assert host.close() == target
    with Image.open(target) as image:
        assert image.size == (128, 64)


def test_close_without_frames(tmp_path) -> None:
    host = HeadlessHost(save_path=tmp_path / "never.png")
    assert host.close() is None
    assert not (tmp_path / "never.png").exists()


def test_execution_error_propagates(load, fake_clock) -> None:
    emu = load(0x00EE)
    with pytest.raises(StackUnderflow):
        _runner(emu, fake_clock).run()


def test_build_renderer_uses_config() -> None:
    renderer = build_renderer(MachineConfig(color="green", scale=3))
    assert renderer.scale == 3
    assert renderer.fg_color == (0x00, 0x80, 0x00)


def test_pacing_restarts_after_key_wait(load, fake_clock) -> None:
    # Parked on the key read for about one second, then spin.
    emu = load(0xF00A, 0x1202)
    host = HeadlessHost()
    host.schedule(600, 0x1)
    config = MachineConfig(instructions_per_second=600)
    result = _runner(emu, fake_clock, host=host, config=config).run(timeout_secs=1.1)
    assert result.reason is StopReason.TIMEOUT
    assert emu.regs.get(0) == 0x1
    # Roughly 0.1s of instructions after the key, not a catch-up burst.
    assert 50 <= result.instructions <= 70

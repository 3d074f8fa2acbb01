from __future__ import annotations

import json

import pytest

from chip8vm.config import MachineConfig


def test_defaults() -> None:
    config = MachineConfig()
    assert config.instructions_per_second == 700
    assert config.timer_hz == 60
    assert config.program_start == 0x200
    assert config.font_base == 0x050
    assert config.color == "purple"


def test_save_load_round_trip(tmp_path) -> None:
    path = tmp_path / "machine.json"
    MachineConfig(name="test", color="blue", scale=4, instructions_per_second=0).save(path)
    data = json.loads(path.read_text())
    assert data["program_start"] == "0x200"
    assert data["font_base"] == "0x050"

    loaded = MachineConfig.load(path)
    assert loaded == MachineConfig(
        name="test", color="blue", scale=4, instructions_per_second=0
    )


def test_from_dict_accepts_hex_and_ints() -> None:
    config = MachineConfig.from_dict({"program_start": "0x600", "font_base": 0})
    assert config.program_start == 0x600
    assert config.font_base == 0


def test_unknown_color_falls_back() -> None:
    assert MachineConfig(color="teal").color == "purple"
    assert MachineConfig.from_dict({"color": "RED"}).color == "red"


@pytest.mark.parametrize(
    "kwargs",
    [{"instructions_per_second": -1}, {"timer_hz": 0}, {"scale": 0}],
)
def test_invalid_values(kwargs) -> None:
    with pytest.raises(ValueError):
        MachineConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"program_start": 0x1100, "font_base": 0x1000},
        {"font_base": 0xFB1},
        {"font_base": -1},
        {"program_start": 0x1000},
        {"font_base": 0x1F0},
        {"font_base": 0x300},
    ],
)
def test_layout_must_fit_memory(kwargs) -> None:
    with pytest.raises(ValueError):
        MachineConfig(**kwargs)


def test_layout_edges_are_accepted() -> None:
    config = MachineConfig(font_base=0x000, program_start=0x050)
    assert (config.font_base, config.program_start) == (0x000, 0x050)
    assert MachineConfig(program_start=0xFFF).program_start == 0xFFF

from __future__ import annotations

import io
import json

import pytest
from PIL import Image

from chip8vm.cli import EXIT_EXEC_ERROR, EXIT_LOAD_ERROR, EXIT_OK, main
from chip8vm.decoder import encode_words


@pytest.fixture
def program(tmp_path):
    def _write(*words: int, name: str = "prog.ch8"):
        path = tmp_path / name
        path.write_bytes(encode_words(*words))
        return path

    return _write


def test_load_runs_to_halt(program, capsys) -> None:
    path = program(0x6001, 0x0000)
    assert main(["load", str(path), "--ips", "0"]) == EXIT_OK
    out = capsys.readouterr().out
    assert f"Loaded 4 bytes from {path}" in out
    assert "Stopped: halted; 2 instructions" in out


def test_step_limit(program, capsys) -> None:
    path = program(0x1200)
    assert main(["load", str(path), "--ips", "0", "--steps", "10"]) == EXIT_OK
    assert "Stopped: step_limit; 10 instructions" in capsys.readouterr().out


def test_execution_error_exit_code(program, capsys) -> None:
    path = program(0x6001, 0x00EE)
    assert main(["load", str(path), "--ips", "0"]) == EXIT_EXEC_ERROR
    err = capsys.readouterr().err
    assert "Execution error: Return with empty call stack at 0x202 (opcode 0x00EE)" in err


def test_invalid_opcode_exit_code(program, capsys) -> None:
    path = program(0x5121)
    assert main(["load", str(path), "--ips", "0"]) == EXIT_EXEC_ERROR
    assert "0x5121" in capsys.readouterr().err


def test_missing_program(tmp_path, capsys) -> None:
    missing = tmp_path / "missing.ch8"
    assert main(["load", str(missing)]) == EXIT_LOAD_ERROR
    assert "Cannot read program" in capsys.readouterr().err


def test_bad_config(program, tmp_path, capsys) -> None:
    path = program(0x0000)
    config = tmp_path / "bad.json"
    config.write_text(json.dumps({"scale": 0}))
    assert main(["load", str(path), "--config", str(config)]) == EXIT_LOAD_ERROR
    assert "Invalid configuration" in capsys.readouterr().err


@pytest.mark.parametrize(
    "payload",
    [{"scale": None}, {"program_start": "0x1000"}, {"font_base": "0x1F0"}],
)
def test_rejected_config_values(program, tmp_path, capsys, payload) -> None:
    path = program(0x0000)
    config = tmp_path / "machine.json"
    config.write_text(json.dumps(payload))
    assert main(["load", str(path), "--config", str(config)]) == EXIT_LOAD_ERROR
    assert "Invalid configuration" in capsys.readouterr().err


def test_unknown_key_is_rejected(program) -> None:
    path = program(0x0000)
    with pytest.raises(SystemExit) as excinfo:
        main(["load", str(path), "--press", "P"])
    assert excinfo.value.code == 2


def test_held_key_and_png(program, tmp_path, capsys) -> None:
    # Draw glyph 0 only when key 5 ("W") is held.
    path = program(0x6505, 0xF029, 0xE5A1, 0xD005, 0x0000)
    png = tmp_path / "out.png"
    argv = [
        "load", str(path), "--ips", "0", "--press", "w",
        "--color", "GREEN", "--scale", "2", "--save-png", str(png),
    ]
    assert main(argv) == EXIT_OK
    out = capsys.readouterr().out
    assert f"Display saved to {png}" in out
    assert "pixels lit" in out
    assert "Activity: 15 memory reads, 0 memory writes, 1 sprite draws, 1 key presses" in out
    with Image.open(png) as image:
        assert image.size == (128, 64)
        assert image.convert("RGB").getpixel((0, 0)) == (0x00, 0x80, 0x00)


def test_config_file(program, tmp_path, capsys) -> None:
    path = program(0x0000, name="offset.ch8")
    config = tmp_path / "machine.json"
    config.write_text(json.dumps({"instructions_per_second": 0, "program_start": "0x200"}))
    assert main(["load", str(path), "--config", str(config)]) == EXIT_OK
    assert "Stopped: halted; 1 instructions" in capsys.readouterr().out


def test_debug_session(program, monkeypatch, capsys) -> None:
    path = program(0x6001, 0x6102, 0x6203, 0x0000)
    monkeypatch.setattr("sys.stdin", io.StringIO("\n\nq\n"))
    assert main(["debug", str(path), "--ips", "0"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "PC=200 OP=6001" in out
    assert "PC=204 OP=6203" in out
    assert "Stopped: quit; 2 instructions" in out

#!/usr/bin/env python3
"""Command line entry point: load and run (or single-step) a program."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import MachineConfig
from .debug.gate import ConsoleStepGate
from .display.palette import COLOR_NAMES
from .emulator import Chip8Emulator
from .errors import ExecutionError, ProgramLoadError
from .keypad import KEY_LAYOUT
from .memory import read_program_file
from .runner import HeadlessHost, Runner, build_renderer

EXIT_OK = 0
EXIT_EXEC_ERROR = 1
EXIT_LOAD_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm", description="CHIP-8 virtual machine"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (-vv traces)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("load", "Load and run a program"),
        ("debug", "Load a program and pause before every instruction"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("filename", help="Raw program image")
        cmd.add_argument("--config", type=str, help="JSON machine configuration")
        cmd.add_argument(
            "--color",
            type=str.lower,
            default=None,
            help=f"Display tint ({', '.join(COLOR_NAMES)}; unknown values use purple)",
        )
        cmd.add_argument("--scale", type=int, default=None, help="PNG pixel scale")
        cmd.add_argument(
            "--ips",
            type=int,
            default=None,
            help="Instructions per second (0 = unthrottled)",
        )
        cmd.add_argument(
            "--steps", type=int, default=None, help="Stop after N instructions"
        )
        cmd.add_argument(
            "--timeout-secs", type=float, default=None, help="Wall clock timeout"
        )
        cmd.add_argument(
            "--press",
            action="append",
            default=[],
            metavar="KEY",
            help="Hold a physical key (1-4, Q-R, A-F, Z-V) for the whole run",
        )
        cmd.add_argument("--seed", type=int, default=None, help="Random seed")
        cmd.add_argument(
            "--save-png", type=str, default=None, help="Save the final display as PNG"
        )
    return parser


def _resolve_config(args: argparse.Namespace) -> MachineConfig:
    config = MachineConfig.load(args.config) if args.config else MachineConfig()
    overrides = {}
    if args.color is not None:
        overrides["color"] = args.color
    if args.scale is not None:
        overrides["scale"] = args.scale
    if args.ips is not None:
        overrides["instructions_per_second"] = args.ips
    if overrides:
        data = config.to_dict()
        data.update(overrides)
        config = MachineConfig.from_dict(data)
    return config


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _resolve_config(args)
    except (OSError, TypeError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    held = []
    for name in args.press:
        index = KEY_LAYOUT.get(name.upper())
        if index is None:
            parser.error(f"Unknown key {name!r}; expected one of {''.join(KEY_LAYOUT)}")
        held.append(index)

    try:
        image = read_program_file(args.filename)
    except ProgramLoadError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_LOAD_ERROR

    emu = Chip8Emulator(
        program_start=config.program_start,
        font_base=config.font_base,
        seed=args.seed,
    )
    loaded = emu.load_program(image)
    print(f"Loaded {loaded} bytes from {args.filename}")

    host = HeadlessHost(
        held_keys=held,
        renderer=build_renderer(config),
        save_path=args.save_png,
    )
    gate = ConsoleStepGate() if args.command == "debug" else None
    runner = Runner(emu, host, config, gate=gate)

    try:
        result = runner.run(max_steps=args.steps, timeout_secs=args.timeout_secs)
    except ExecutionError as exc:
        print(f"Execution error: {exc}", file=sys.stderr)
        return EXIT_EXEC_ERROR
    except KeyboardInterrupt:
        print("Interrupted by the user")
        return EXIT_OK
    finally:
        saved = host.close()
        if saved is not None:
            print(f"Display saved to {saved}")

    print(
        f"Stopped: {result.reason.value}; {result.instructions} instructions, "
        f"{result.timer_ticks} timer ticks, {result.elapsed:.3f}s, "
        f"{emu.display.lit_count()} pixels lit"
    )
    print(
        f"Activity: {emu.memory.read_count} memory reads, "
        f"{emu.memory.write_count} memory writes, {emu.display.draw_count} sprite draws, "
        f"{emu.keypad.press_count} key presses"
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

"""Machine configuration for the CHIP-8 virtual machine."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Union
import json
from pathlib import Path

from ..constants import (
    DEFAULT_INSTRUCTIONS_PER_SECOND,
    FONT_BASE,
    PROGRAM_START,
    TIMER_HZ,
)
from ..display.palette import COLOR_NAMES
from ..memory import check_layout


def _parse_int(value: Union[int, str]) -> int:
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


@dataclass
class MachineConfig:
    """Runtime settings; addresses are serialised as hex strings."""
    name: str = "CHIP-8"
    instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND  # 0 = unthrottled
    timer_hz: int = TIMER_HZ
    program_start: int = PROGRAM_START
    font_base: int = FONT_BASE
    color: str = "purple"
    scale: int = 8

    def __post_init__(self):
        if self.instructions_per_second < 0:
            raise ValueError("instructions_per_second must be >= 0")
        if self.timer_hz <= 0:
            raise ValueError("timer_hz must be positive")
        if self.scale < 1:
            raise ValueError("scale must be >= 1")
        check_layout(font_base=self.font_base, program_start=self.program_start)
        if self.color not in COLOR_NAMES:
            self.color = "purple"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["program_start"] = f"0x{self.program_start:03X}"
        data["font_base"] = f"0x{self.font_base:03X}"
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MachineConfig':
        defaults = cls()
        return cls(
            name=data.get("name", defaults.name),
            instructions_per_second=int(
                data.get("instructions_per_second", defaults.instructions_per_second)
            ),
            timer_hz=int(data.get("timer_hz", defaults.timer_hz)),
            program_start=_parse_int(data.get("program_start", defaults.program_start)),
            font_base=_parse_int(data.get("font_base", defaults.font_base)),
            color=str(data.get("color", defaults.color)).lower(),
            scale=int(data.get("scale", defaults.scale)),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'MachineConfig':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

"""Configuration system for the CHIP-8 virtual machine."""

from .machine_config import MachineConfig

__all__ = ["MachineConfig"]

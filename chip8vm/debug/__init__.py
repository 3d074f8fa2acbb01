"""Debugging aids layered outside the core state machine."""

from .gate import ConsoleStepGate, ScriptedStepGate, StepCommand, StepGate

__all__ = ["ConsoleStepGate", "ScriptedStepGate", "StepCommand", "StepGate"]

"""CHIP-8 interpreter package."""

from .config import MachineConfig
from .emulator import Chip8Emulator
from .errors import (
    Chip8Error,
    ConfigError,
    DecodeError,
    MachineHaltedError,
    MemoryAccessError,
    ProgramLoadError,
    StackOverflowError,
    StackUnderflowError,
    UnknownOpcodeError,
)
from .keyboard import KeypadState, NullInput, ScriptedInput, KeySchedule
from .loader import ProgramLoader
from .machine_state import ExecutionMode, MachineState
from .scheduler import CycleScheduler, RunResult
from .state_model import MachineSnapshot, StateDiff, capture_state, diff_states

__all__ = [
    "Chip8Emulator",
    "Chip8Error",
    "ConfigError",
    "CycleScheduler",
    "DecodeError",
    "ExecutionMode",
    "KeySchedule",
    "KeypadState",
    "MachineConfig",
    "MachineHaltedError",
    "MachineSnapshot",
    "MachineState",
    "MemoryAccessError",
    "NullInput",
    "ProgramLoadError",
    "ProgramLoader",
    "RunResult",
    "ScriptedInput",
    "StackOverflowError",
    "StackUnderflowError",
    "StateDiff",
    "UnknownOpcodeError",
    "capture_state",
    "diff_states",
]

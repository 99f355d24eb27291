"""State containers owned by the CHIP-8 execution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

from .constants import (
    FLAG_REGISTER,
    I_MASK,
    NUM_REGISTERS,
    PROGRAM_START,
    STACK_DEPTH,
)
from .display.framebuffer import Framebuffer
from .errors import StackOverflowError, StackUnderflowError
from .memory import Chip8Memory


class ExecutionMode(Enum):
    """Top-level engine state checked by the scheduler every tick."""

    RUNNING = auto()
    AWAITING_KEY = auto()
    HALTED = auto()


class RegisterFile:
    """V0-VF (8-bit) plus the 16-bit address register I."""

    def __init__(self) -> None:
        self._v: List[int] = [0] * NUM_REGISTERS
        self._i = 0

    def get(self, index: int) -> int:
        return self._v[index & 0xF]

    def set(self, index: int, value: int) -> None:
        self._v[index & 0xF] = value & 0xFF

    @property
    def i(self) -> int:
        return self._i

    @i.setter
    def i(self, value: int) -> None:
        self._i = value & I_MASK

    @property
    def vf(self) -> int:
        return self._v[FLAG_REGISTER]

    def set_flag(self, condition: bool) -> None:
        self._v[FLAG_REGISTER] = 1 if condition else 0

    def values(self) -> Tuple[int, ...]:
        return tuple(self._v)

    def __repr__(self) -> str:
        regs = " ".join(f"V{n:X}={v:02X}" for n, v in enumerate(self._v))
        return f"RegisterFile({regs} I={self._i:04X})"


class CallStack:
    """Bounded return-address stack; overflow and underflow are fatal."""

    def __init__(self, depth: int = STACK_DEPTH) -> None:
        self._depth = depth
        self._entries: List[int] = []

    @property
    def pointer(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._depth

    def push(self, address: int) -> None:
        if len(self._entries) >= self._depth:
            raise StackOverflowError(
                f"Call stack overflow (depth {self._depth})", len(self._entries)
            )
        self._entries.append(address & 0xFFFF)

    def pop(self) -> int:
        if not self._entries:
            raise StackUnderflowError("Return with empty call stack", 0)
        return self._entries.pop()

    def entries(self) -> Tuple[int, ...]:
        return tuple(self._entries)


@dataclass
class Timers:
    """Delay and sound countdown timers, decremented once per tick."""

    delay: int = 0
    sound: int = 0

    def tick(self) -> None:
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    def set_delay(self, value: int) -> None:
        self.delay = value & 0xFF

    def set_sound(self, value: int) -> None:
        self.sound = value & 0xFF

    @property
    def sound_active(self) -> bool:
        return self.sound > 0


@dataclass
class MachineState:
    """All mutable machine state, passed by reference to decoder and dispatcher."""

    memory: Chip8Memory = field(default_factory=Chip8Memory)
    registers: RegisterFile = field(default_factory=RegisterFile)
    stack: CallStack = field(default_factory=CallStack)
    timers: Timers = field(default_factory=Timers)
    framebuffer: Framebuffer = field(default_factory=Framebuffer)
    pc: int = PROGRAM_START
    mode: ExecutionMode = ExecutionMode.RUNNING
    # Target register of a pending Fx0A while mode is AWAITING_KEY.
    await_register: Optional[int] = None

    def advance(self, words: int = 1) -> None:
        self.pc = (self.pc + 2 * words) & 0xFFFF


__all__ = [
    "CallStack",
    "ExecutionMode",
    "MachineState",
    "RegisterFile",
    "Timers",
]

"""Exception hierarchy for the CHIP-8 interpreter."""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for every interpreter failure."""


class ProgramLoadError(Chip8Error):
    """Program is absent or does not fit in program space."""

    def __init__(self, message: str, size: Optional[int] = None) -> None:
        super().__init__(message)
        self.size = size


class ConfigError(Chip8Error):
    """Machine configuration is invalid."""


class DecodeError(Chip8Error):
    """Fatal condition raised while fetching or executing an instruction."""

    def __init__(self, message: str, address: int) -> None:
        super().__init__(message)
        self.address = address


class MemoryAccessError(DecodeError):
    """An access fell outside 0x000-0xFFF."""

    def __init__(self, address: int, length: int = 1) -> None:
        end = address + length - 1
        super().__init__(
            f"Memory access out of bounds: 0x{address:04X}-0x{end:04X}", address
        )
        self.length = length


class UnknownOpcodeError(DecodeError):
    """The fetched word matches no instruction pattern."""

    def __init__(self, opcode: int, address: int) -> None:
        super().__init__(
            f"Unknown opcode 0x{opcode:04X} at 0x{address:03X}", address
        )
        self.opcode = opcode


class StackError(Chip8Error):
    """Call stack misuse."""

    def __init__(self, message: str, depth: int) -> None:
        super().__init__(message)
        self.depth = depth


class StackOverflowError(StackError):
    pass


class StackUnderflowError(StackError):
    pass


class MachineHaltedError(Chip8Error):
    """The machine was ticked after a fatal error halted it."""

    def __init__(self, cause: Optional[BaseException]) -> None:
        super().__init__(f"Machine is halted: {cause}")
        self.cause = cause


__all__ = [
    "Chip8Error",
    "ConfigError",
    "DecodeError",
    "MachineHaltedError",
    "MemoryAccessError",
    "ProgramLoadError",
    "StackError",
    "StackOverflowError",
    "StackUnderflowError",
    "UnknownOpcodeError",
]

"""Flat 4 KiB memory for the CHIP-8 machine."""

from __future__ import annotations

from typing import Iterable

from .constants import FONT_START, MEMORY_SIZE, PROGRAM_START
from .errors import MemoryAccessError, ProgramLoadError
from .font import FONT_DATA


class Chip8Memory:
    """Bounds-checked byte array covering 0x000-0xFFF.

    Every access outside the address space raises ``MemoryAccessError``;
    nothing wraps silently.
    """

    def __init__(self) -> None:
        self.data = bytearray(MEMORY_SIZE)

    def __len__(self) -> int:
        return len(self.data)

    def _check(self, address: int, length: int = 1) -> None:
        if address < 0 or length < 0 or address + length > MEMORY_SIZE:
            raise MemoryAccessError(address, max(length, 1))

    def read_byte(self, address: int) -> int:
        self._check(address)
        return self.data[address]

    def write_byte(self, address: int, value: int) -> None:
        self._check(address)
        self.data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (high byte first)."""
        self._check(address, 2)
        return (self.data[address] << 8) | self.data[address + 1]

    def read_block(self, address: int, length: int) -> bytes:
        self._check(address, length)
        return bytes(self.data[address : address + length])

    def write_block(self, address: int, values: Iterable[int]) -> None:
        payload = bytes(v & 0xFF for v in values)
        self._check(address, len(payload))
        self.data[address : address + len(payload)] = payload

    def load_font(self) -> None:
        self.write_block(FONT_START, FONT_DATA)

    def load_program(self, program: bytes) -> None:
        """Copy ``program`` verbatim to 0x200; the whole load fails or none of it lands."""
        if not program:
            raise ProgramLoadError("Program is empty", size=0)
        if PROGRAM_START + len(program) > MEMORY_SIZE:
            raise ProgramLoadError(
                f"Program too large: {len(program)} bytes "
                f"(max {MEMORY_SIZE - PROGRAM_START})",
                size=len(program),
            )
        self.write_block(PROGRAM_START, program)


__all__ = ["Chip8Memory"]

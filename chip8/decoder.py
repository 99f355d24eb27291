"""Instruction fetch and disassembly."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .constants import PROGRAM_START
from .machine_state import MachineState
from .opcodes import OpcodePattern, classify


@dataclass(frozen=True)
class Instruction:
    """A fetched instruction word with its operand nibbles split out."""

    word: int
    address: int

    @property
    def kind(self) -> int:
        return (self.word >> 12) & 0xF

    @property
    def x(self) -> int:
        return (self.word >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.word >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.word & 0xF

    @property
    def kk(self) -> int:
        return self.word & 0xFF

    @property
    def nnn(self) -> int:
        return self.word & 0xFFF

    @property
    def pattern(self) -> Optional[OpcodePattern]:
        return classify(self.word)

    def mnemonic(self) -> str:
        pattern = self.pattern
        if pattern is None:
            return f"DW 0x{self.word:04X}"
        return pattern.template.format(
            x=self.x, y=self.y, n=self.n, kk=self.kk, nnn=self.nnn
        )

    def __str__(self) -> str:
        return f"{self.address:03X}  {self.word:04X}  {self.mnemonic()}"


class Decoder:
    """Reads the big-endian word at PC. Never mutates machine state."""

    def fetch(self, state: MachineState) -> Instruction:
        # read_word raises MemoryAccessError when PC+1 leaves the address space.
        return Instruction(word=state.memory.read_word(state.pc), address=state.pc)


def iter_instructions(
    program: bytes, origin: int = PROGRAM_START
) -> Iterator[Instruction]:
    """Yield instructions for each aligned word in ``program``.

    A trailing odd byte is padded with zero.
    """
    for offset in range(0, len(program), 2):
        pair = program[offset : offset + 2]
        hi = pair[0]
        lo = pair[1] if len(pair) > 1 else 0
        yield Instruction(word=(hi << 8) | lo, address=origin + offset)


def encode_words(words: Iterable[int]) -> bytes:
    """Pack 16-bit instruction words big-endian, the inverse of ``iter_instructions``."""
    out = bytearray()
    for word in words:
        out += bytes(((word >> 8) & 0xFF, word & 0xFF))
    return bytes(out)


def disassemble(program: bytes, origin: int = PROGRAM_START) -> List[str]:
    return [str(instr) for instr in iter_instructions(program, origin)]


def decode_word(word: int, address: int = PROGRAM_START) -> Tuple[str, bool]:
    """Return ``(mnemonic, recognized)`` for a single word."""
    instr = Instruction(word=word & 0xFFFF, address=address)
    return instr.mnemonic(), instr.pattern is not None


__all__ = [
    "Decoder",
    "Instruction",
    "decode_word",
    "disassemble",
    "encode_words",
    "iter_instructions",
]

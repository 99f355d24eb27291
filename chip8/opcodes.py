"""CHIP-8 opcode patterns grouped by their class (high) nibble.

Within a class the patterns are listed most specific first; ``classify``
scans them in order and returns the first whose mask matches.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


class Op(enum.Enum):
    CLS = "CLS"
    RET = "RET"
    JP = "JP"
    CALL = "CALL"
    SE_IMM = "SE_IMM"
    SNE_IMM = "SNE_IMM"
    SE_REG = "SE_REG"
    LD_IMM = "LD_IMM"
    ADD_IMM = "ADD_IMM"
    LD_REG = "LD_REG"
    OR = "OR"
    AND = "AND"
    XOR = "XOR"
    ADD_REG = "ADD_REG"
    SUB = "SUB"
    SHR = "SHR"
    SUBN = "SUBN"
    SHL = "SHL"
    SNE_REG = "SNE_REG"
    LD_I = "LD_I"
    JP_V0 = "JP_V0"
    RND = "RND"
    DRW = "DRW"
    SKP = "SKP"
    SKNP = "SKNP"
    LD_VX_DT = "LD_VX_DT"
    LD_VX_K = "LD_VX_K"
    LD_DT_VX = "LD_DT_VX"
    LD_ST_VX = "LD_ST_VX"
    ADD_I = "ADD_I"
    LD_F = "LD_F"
    LD_B = "LD_B"
    STORE_REGS = "STORE_REGS"
    LOAD_REGS = "LOAD_REGS"


@dataclass(frozen=True)
class OpcodePattern:
    op: Op
    mask: int
    value: int
    # str.format template; fields: x, y, n, kk, nnn
    template: str

    def matches(self, word: int) -> bool:
        return (word & self.mask) == self.value


def _p(op: Op, mask: int, value: int, template: str) -> OpcodePattern:
    return OpcodePattern(op, mask, value, template)


OPCODE_CLASSES: Dict[int, Tuple[OpcodePattern, ...]] = {
    0x0: (
        _p(Op.CLS, 0xFFFF, 0x00E0, "CLS"),
        _p(Op.RET, 0xFFFF, 0x00EE, "RET"),
    ),
    0x1: (_p(Op.JP, 0xF000, 0x1000, "JP 0x{nnn:03X}"),),
    0x2: (_p(Op.CALL, 0xF000, 0x2000, "CALL 0x{nnn:03X}"),),
    0x3: (_p(Op.SE_IMM, 0xF000, 0x3000, "SE V{x:X}, 0x{kk:02X}"),),
    0x4: (_p(Op.SNE_IMM, 0xF000, 0x4000, "SNE V{x:X}, 0x{kk:02X}"),),
    0x5: (_p(Op.SE_REG, 0xF00F, 0x5000, "SE V{x:X}, V{y:X}"),),
    0x6: (_p(Op.LD_IMM, 0xF000, 0x6000, "LD V{x:X}, 0x{kk:02X}"),),
    0x7: (_p(Op.ADD_IMM, 0xF000, 0x7000, "ADD V{x:X}, 0x{kk:02X}"),),
    0x8: (
        _p(Op.LD_REG, 0xF00F, 0x8000, "LD V{x:X}, V{y:X}"),
        _p(Op.OR, 0xF00F, 0x8001, "OR V{x:X}, V{y:X}"),
        _p(Op.AND, 0xF00F, 0x8002, "AND V{x:X}, V{y:X}"),
        _p(Op.XOR, 0xF00F, 0x8003, "XOR V{x:X}, V{y:X}"),
        _p(Op.ADD_REG, 0xF00F, 0x8004, "ADD V{x:X}, V{y:X}"),
        _p(Op.SUB, 0xF00F, 0x8005, "SUB V{x:X}, V{y:X}"),
        _p(Op.SHR, 0xF00F, 0x8006, "SHR V{x:X}"),
        _p(Op.SUBN, 0xF00F, 0x8007, "SUBN V{x:X}, V{y:X}"),
        _p(Op.SHL, 0xF00F, 0x800E, "SHL V{x:X}"),
    ),
    0x9: (_p(Op.SNE_REG, 0xF00F, 0x9000, "SNE V{x:X}, V{y:X}"),),
    0xA: (_p(Op.LD_I, 0xF000, 0xA000, "LD I, 0x{nnn:03X}"),),
    0xB: (_p(Op.JP_V0, 0xF000, 0xB000, "JP V0, 0x{nnn:03X}"),),
    0xC: (_p(Op.RND, 0xF000, 0xC000, "RND V{x:X}, 0x{kk:02X}"),),
    0xD: (_p(Op.DRW, 0xF000, 0xD000, "DRW V{x:X}, V{y:X}, {n}"),),
    0xE: (
        _p(Op.SKP, 0xF0FF, 0xE09E, "SKP V{x:X}"),
        _p(Op.SKNP, 0xF0FF, 0xE0A1, "SKNP V{x:X}"),
    ),
    0xF: (
        _p(Op.LD_VX_DT, 0xF0FF, 0xF007, "LD V{x:X}, DT"),
        _p(Op.LD_VX_K, 0xF0FF, 0xF00A, "LD V{x:X}, K"),
        _p(Op.LD_DT_VX, 0xF0FF, 0xF015, "LD DT, V{x:X}"),
        _p(Op.LD_ST_VX, 0xF0FF, 0xF018, "LD ST, V{x:X}"),
        _p(Op.ADD_I, 0xF0FF, 0xF01E, "ADD I, V{x:X}"),
        _p(Op.LD_F, 0xF0FF, 0xF029, "LD F, V{x:X}"),
        _p(Op.LD_B, 0xF0FF, 0xF033, "LD B, V{x:X}"),
        _p(Op.STORE_REGS, 0xF0FF, 0xF055, "LD [I], V{x:X}"),
        _p(Op.LOAD_REGS, 0xF0FF, 0xF065, "LD V{x:X}, [I]"),
    ),
}


def classify(word: int) -> Optional[OpcodePattern]:
    """Return the pattern matching ``word`` or None when it is unrecognized."""

    for pattern in OPCODE_CLASSES[(word >> 12) & 0xF]:
        if pattern.matches(word):
            return pattern
    return None


__all__ = ["OPCODE_CLASSES", "Op", "OpcodePattern", "classify"]

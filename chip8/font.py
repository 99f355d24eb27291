"""Built-in 4x5 hexadecimal glyphs copied into low memory at power-on."""

from __future__ import annotations

from typing import Tuple

from .constants import GLYPH_SIZE

FONT_DATA: Tuple[int, ...] = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)


def glyph(digit: int) -> Tuple[int, ...]:
    """Return the five sprite rows for hex ``digit`` (0-F)."""

    if not 0 <= digit <= 0xF:
        raise ValueError(f"Not a hex digit: {digit}")
    start = digit * GLYPH_SIZE
    return FONT_DATA[start : start + GLYPH_SIZE]


__all__ = ["FONT_DATA", "glyph"]
